"""
Roll a list of RegionRecords up into one Rollup.
"""

import re

from case_records import Rollup

_TRAILING_ZEROS = re.compile(r"\.00%$")


def format_percent(ratio):
    """0.02 -> "2%", 0.0345 -> "3.45%" (two decimals, ".00" trimmed)."""
    return _TRAILING_ZEROS.sub("%", f"{100 * ratio:.2f}%")


def fatality_ratio(dead, confirmed, cured):
    """dead / (confirmed + cured) as a percentage string.

    "0%" when nobody died or when there is nothing to divide by.
    """
    denominator = confirmed + cured
    if dead <= 0 or denominator <= 0:
        return "0%"
    return format_percent(dead / denominator)


def lethality(dead, total):
    """dead / total as a percentage string, "0%" on zero deaths or totals."""
    if dead <= 0 or total <= 0:
        return "0%"
    return format_percent(dead / total)


def aggregate(records, update_time=""):
    """Sum the counts of every record that has a canonical name."""
    confirmed = current_confirmed = suspected = cured = dead = 0
    for record in records:
        if not record.english_name:
            continue
        confirmed += record.confirmed
        current_confirmed += record.current_confirmed
        suspected += record.suspected
        cured += record.cured
        dead += record.dead

    return Rollup(
        time=update_time,
        confirmed=confirmed,
        current_confirmed=current_confirmed,
        suspect=suspected,
        cured=cured,
        death=dead,
        fatality=fatality_ratio(dead, confirmed, cured),
    )
