from datetime import datetime, timezone

from case_records import MapEntry, RegionRecord, TableRow, split_results
from view_builders import (INTENSITY_SENTINEL, build_global_map, build_per_million_map,
                           build_table, build_totals, format_update_time, table_frame)


def test_format_update_time_utc():
    assert format_update_time(1588000000000, timezone.utc) == "2020-04-27 15:06:40"


def test_format_update_time_local():
    expected = datetime.fromtimestamp(1588000000).strftime("%Y-%m-%d %H:%M:%S")
    assert format_update_time(1588000000000) == expected


def test_format_update_time_missing():
    assert format_update_time(None) == ""
    assert format_update_time("soon") == ""


def test_build_totals(records):
    totals = build_totals(records, timezone.utc)
    assert totals.update_time == "2020-04-27 15:06:40"
    assert totals.domestic.confirmed == 69000
    assert totals.domestic.fatality == "3.39%"
    assert totals.foreign.confirmed == 1160712
    assert totals.overall.confirmed == 69000 + 1160712
    assert totals.overall.time == totals.update_time


def test_build_totals_empty():
    totals = build_totals([])
    assert totals.update_time == ""
    assert totals.overall.confirmed == 0


def test_global_map_drops_unnamed_and_appends_breakdown(records):
    domestic, foreign = split_results(records)
    pairs = build_global_map(domestic, foreign)

    unnamed = sum(1 for r in foreign if not r.english_name)
    assert unnamed == 1
    assert len(pairs) == len(foreign) - unnamed + 1
    assert pairs[-1] == {"name": "China", "value": 69000}
    names = [p["name"] for p in pairs]
    assert "United States" in names
    assert "United Arab Emirates" in names
    assert "Diamond Princess Cruise" in names
    assert "" not in names


def test_global_map_without_breakdown(records):
    _, foreign = split_results(records)
    pairs = build_global_map([], foreign)
    assert "China" not in [p["name"] for p in pairs]


def test_per_million_map(countries_snapshot):
    entries = build_per_million_map(countries_snapshot)
    assert [e.name for e in entries] == ["United States", "Germany", "Korea"]

    usa = entries[0]
    assert usa == MapEntry(name="United States", value=3053.0, active_count=820000,
                           confirmed_count=1010507, increased_count=25000,
                           cured_count=138990, dead_count=56803, lethality="5.62%")
    korea = entries[2]
    assert korea.value == INTENSITY_SENTINEL
    assert korea.lethality == "0%"


def test_per_million_map_tolerates_garbage():
    entries = build_per_million_map([None, {"name": "Chad", "total": "x", "dead": "y"}])
    assert len(entries) == 1
    assert entries[0].confirmed_count == 0
    assert entries[0].value == INTENSITY_SENTINEL
    assert build_per_million_map(None) == []


def test_per_million_map_non_finite_intensity_uses_sentinel():
    entries = build_per_million_map([
        {"name": "Chad", "total": "46", "dead": "0", "perMppl": "NaN"},
        {"name": "Niger", "total": "inf", "dead": "1", "perMppl": "Infinity"},
    ])
    assert [e.value for e in entries] == [INTENSITY_SENTINEL, INTENSITY_SENTINEL]
    assert entries[1].confirmed_count == 0
    assert entries[1].lethality == "0%"


def test_table_ordering():
    foreign = [
        RegionRecord("a", "A", confirmed=10, cured=1),
        RegionRecord("b", "B", confirmed=10, cured=5),
        RegionRecord("c", "C", confirmed=20, cured=0),
    ]
    assert [row.name for row in build_table([], foreign)] == ["C", "B", "A"]


def test_table_name_breaks_ties():
    foreign = [
        RegionRecord("z", "Zambia", confirmed=10, cured=5),
        RegionRecord("a", "Angola", confirmed=10, cured=5),
        RegionRecord("m", "Mali", confirmed=10, cured=5),
    ]
    assert [row.name for row in build_table([], foreign)] == ["Angola", "Mali", "Zambia"]


def test_table_merges_breakdown_row(records):
    domestic, foreign = split_results(records)
    rows = build_table(domestic, foreign)
    assert [row.name for row in rows] == [
        "United States", "Germany", "China", "United Arab Emirates",
        "Diamond Princess Cruise"]
    china = rows[2]
    assert china == TableRow(name="China", confirmed=69000, current_confirmed=150,
                             suspected=2, cured=63900, dead=4504)


def test_table_frame_empty():
    assert table_frame([]).empty
