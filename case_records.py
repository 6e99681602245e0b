"""
Record types shared by the aggregation and view-building code.

RegionRecord  - one region of the area snapshot (source A)
Rollup        - summed counts over a set of RegionRecords
MapEntry      - one country of the cases-per-million map (source B)
TableRow      - one row of the global table

All of them are rebuilt from scratch on every fetch cycle and never mutated.
"""

import math
import re
from dataclasses import dataclass, asdict, field
from typing import Optional

from country_names import canonical_name

_SEPARATORS = re.compile(r"[,\s]")


def parse_number(value, default=0.0):
    """Parse a count that may arrive as "1,234 " or 1234.

    Thousands separators and whitespace are stripped. Anything that still
    does not parse to a finite number (None, "", "N/A", "NaN", "inf", ...)
    gives `default`.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else default
    if not isinstance(value, str):
        return default
    text = _SEPARATORS.sub("", value)
    if not text:
        return default
    try:
        number = float(text)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def parse_count(value):
    """Integer version of parse_number; malformed input gives 0."""
    return int(parse_number(value, 0))


@dataclass(frozen=True)
class RegionRecord:
    country_name: str
    english_name: str
    confirmed: int = 0
    current_confirmed: int = 0
    suspected: int = 0
    cured: int = 0
    dead: int = 0
    update_time: Optional[int] = None
    cities: Optional[tuple] = field(default=None, compare=False, repr=False)

    @property
    def has_breakdown(self):
        """True for records that come with a sub-region (cities) list."""
        return self.cities is not None

    @classmethod
    def from_payload(cls, item):
        cities = item.get("cities")
        update_time = item.get("updateTime")
        return cls(
            country_name=item.get("countryName") or "",
            english_name=canonical_name(item.get("countryName"),
                                        item.get("countryEnglishName")),
            confirmed=parse_count(item.get("confirmedCount")),
            current_confirmed=parse_count(item.get("currentConfirmedCount")),
            suspected=parse_count(item.get("suspectedCount")),
            cured=parse_count(item.get("curedCount")),
            dead=parse_count(item.get("deadCount")),
            update_time=update_time if isinstance(update_time, (int, float)) else None,
            cities=tuple(cities) if isinstance(cities, list) else None,
        )


@dataclass(frozen=True)
class Rollup:
    time: str
    confirmed: int
    current_confirmed: int
    suspect: int
    cured: int
    death: int
    fatality: str


@dataclass(frozen=True)
class MapEntry:
    name: str
    value: float
    active_count: int
    confirmed_count: int
    increased_count: int
    cured_count: int
    dead_count: int
    lethality: str


@dataclass(frozen=True)
class TableRow:
    name: str
    confirmed: int
    current_confirmed: int
    suspected: int
    cured: int
    dead: int

    def as_dict(self):
        return asdict(self)


def parse_results(payload):
    """RegionRecords from an area-snapshot payload ({"results": [...]})."""
    if not isinstance(payload, dict):
        return []
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    return [RegionRecord.from_payload(item) for item in results
            if isinstance(item, dict)]


def split_results(records):
    """Split records into (domestic, foreign).

    Domestic records carry a sub-region list and are only ever counted
    through their breakdown; a flat record for the same country would
    count it twice, so it is left out of the foreign list.
    """
    domestic = [r for r in records if r.has_breakdown]
    domestic_names = {r.english_name for r in domestic if r.english_name}
    foreign = [r for r in records
               if not r.has_breakdown and r.english_name not in domestic_names]
    return domestic, foreign
