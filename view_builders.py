"""
View models for the dashboard panels.

Three independent transforms over an already-fetched snapshot:

  - totals: domestic / rest-of-world / global Rollups plus the update time
  - maps:   {name, value} pairs for the breakdown map (source A) and full
            MapEntry records for the cases-per-million map (source B)
  - table:  TableRows sorted by confirmed desc, cured desc, name asc

None of them raise on malformed input: unnamed records are dropped and
unparseable numbers count as 0.
"""

from dataclasses import dataclass
from datetime import datetime

import pandas as pd

from aggregator import aggregate, lethality
from case_records import MapEntry, TableRow, parse_count, parse_number, split_results
from country_names import convert_name_to_map

# Name used for the synthetic region built from the province breakdown
AGGREGATE_REGION_NAME = "China"

# Shading value for countries the snapshot has no per-million rate for
INTENSITY_SENTINEL = 1

TABLE_COLUMNS = ["name", "confirmed", "current_confirmed", "suspected", "cured", "dead"]
TABLE_SORT_KEYS = ["confirmed", "cured", "name"]
TABLE_SORT_ASCENDING = [False, False, True]


@dataclass(frozen=True)
class Totals:
    domestic: object
    foreign: object
    overall: object
    update_time: str


def format_update_time(epoch_ms, tz=None):
    """Epoch milliseconds -> "YYYY-MM-DD HH:mm:ss" (local time unless tz given)."""
    if isinstance(epoch_ms, bool) or not isinstance(epoch_ms, (int, float)):
        return ""
    try:
        stamp = datetime.fromtimestamp(epoch_ms / 1000, tz)
    except (OverflowError, OSError, ValueError):
        return ""
    return stamp.strftime("%Y-%m-%d %H:%M:%S")


def _aggregate_name(domestic):
    for record in domestic:
        if record.english_name:
            return record.english_name
    return AGGREGATE_REGION_NAME


def build_totals(records, tz=None):
    """Domestic, foreign and global Rollups for one area snapshot."""
    domestic, foreign = split_results(records)
    update_time = format_update_time(records[0].update_time, tz) if records else ""
    return Totals(
        domestic=aggregate(domestic, update_time),
        foreign=aggregate(foreign, update_time),
        overall=aggregate(domestic + foreign, update_time),
        update_time=update_time,
    )


def build_global_map(domestic, foreign):
    """{name, value} pairs of confirmed counts, breakdown region included."""
    pairs = [{"name": record.english_name, "value": record.confirmed}
             for record in foreign if record.english_name]
    if domestic:
        pairs.append({"name": _aggregate_name(domestic),
                      "value": aggregate(domestic).confirmed})
    return pairs


def _intensity(per_million):
    value = parse_number(per_million, None)
    if value is None:
        return INTENSITY_SENTINEL
    return value


def map_entry(country):
    """MapEntry for one countries-snapshot element."""
    dead = parse_count(country.get("dead"))
    total = parse_count(country.get("total"))
    return MapEntry(
        name=convert_name_to_map(country.get("name")),
        value=_intensity(country.get("perMppl")),
        active_count=parse_count(country.get("active")),
        confirmed_count=total,
        increased_count=parse_count(country.get("increased")),
        cured_count=parse_count(country.get("recovered")),
        dead_count=dead,
        lethality=lethality(dead, total),
    )


def build_per_million_map(countries):
    """MapEntries for the cases-per-million map; unnamed countries are dropped."""
    entries = []
    for country in countries or []:
        if not isinstance(country, dict):
            continue
        entry = map_entry(country)
        if entry.name:
            entries.append(entry)
    return entries


def _table_row(record):
    return TableRow(
        name=record.english_name,
        confirmed=record.confirmed,
        current_confirmed=record.current_confirmed,
        suspected=record.suspected,
        cured=record.cured,
        dead=record.dead,
    )


def _breakdown_row(name, rollup):
    return TableRow(
        name=name,
        confirmed=rollup.confirmed,
        current_confirmed=rollup.current_confirmed,
        suspected=rollup.suspect,
        cured=rollup.cured,
        dead=rollup.death,
    )


def table_frame(rows):
    """DataFrame of TableRows in display order."""
    df = pd.DataFrame([row.as_dict() for row in rows], columns=TABLE_COLUMNS)
    if df.empty:
        return df
    return df.sort_values(TABLE_SORT_KEYS, ascending=TABLE_SORT_ASCENDING,
                          kind="mergesort").reset_index(drop=True)


def build_table(domestic, foreign):
    """Table rows: one synthetic breakdown row plus every named foreign country."""
    rows = [_table_row(record) for record in foreign]
    if domestic:
        rows.append(_breakdown_row(_aggregate_name(domestic), aggregate(domestic)))
    rows = [row for row in rows if row.name]

    ordered = table_frame(rows)
    return [TableRow(**record) for record in ordered.to_dict("records")]
