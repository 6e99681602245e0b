from case_records import MapEntry
from map_presentation import (LOADING_TEXT, NO_CASE, MapRegistry, bucket_labels,
                              format_count, format_tooltip, global_map_figure,
                              intensity_bucket, loading_figure, per_million_figure)


def test_registry_registers_once(world_geometry):
    registry = MapRegistry()
    assert not registry.is_registered("world")
    assert registry.register("world", world_geometry) is True
    assert registry.register("world", {"features": []}) is False
    assert registry.get("world") is world_geometry


def test_intensity_buckets():
    assert intensity_bucket(0) == 0
    assert intensity_bucket(49) == 0
    assert intensity_bucket(50) == 1
    assert intensity_bucket(199) == 1
    assert intensity_bucket(200) == 2
    assert intensity_bucket(999) == 3
    assert intensity_bucket(1000) == 4
    assert intensity_bucket(250000) == 4


def test_bucket_labels():
    assert bucket_labels() == ["0-49", "50-199", "200-499", "500-999", "≥1,000"]


def test_format_count():
    assert format_count(1234567) == "1,234,567"
    assert format_count(" 1234 ") == "1,234"
    assert format_count(3053.0) == "3,053"
    assert format_count(None) == "0"


def test_tooltip_without_data():
    assert format_tooltip("Chad") == f"<b>Chad</b><br>Confirmed: {NO_CASE}"
    assert format_tooltip("Chad", 1200) == "<b>Chad</b><br>Confirmed: 1,200"


def test_tooltip_with_entry():
    entry = MapEntry("Germany", 1895.0, 30000, 158758, 1000, 120400, 6126, "3.86%")
    text = format_tooltip(entry.name, entry.value, entry)
    assert text.startswith("<b>Germany</b>")
    assert "Per 1M ppl: 1,895" in text
    assert "Confirmed: 158,758" in text
    assert "Active: 30,000" in text
    assert "Cured: 120,400" in text
    assert "Death: 6,126" in text
    assert "Lethality: 3.86%" in text


def test_loading_figure():
    fig = loading_figure()
    assert fig.layout.annotations[0].text == LOADING_TEXT


def test_figure_without_geometry_has_no_map():
    fig = per_million_figure([], MapRegistry())
    assert len(fig.data) == 0


def test_per_million_figure(world_geometry):
    registry = MapRegistry()
    registry.register("world", world_geometry)
    entries = [
        MapEntry("United States", 3053.0, 1, 2, 3, 4, 5, "1%"),
        MapEntry("Korea", 1, 1, 2, 3, 4, 0, "0%"),
    ]
    fig = per_million_figure(entries, registry)

    no_data, cases = fig.data
    assert no_data.type == "choropleth"
    assert set(no_data.locations) == {"Germany", "China", "Chad"}
    assert all(NO_CASE in text for text in no_data.text)

    assert list(cases.locations) == ["United States", "Korea"]
    assert list(cases.z) == [4, 0]
    assert cases.featureidkey == "properties.name"
    assert list(cases.colorbar.ticktext) == bucket_labels()
    assert fig.layout.clickmode == "event+select"


def test_global_map_figure(world_geometry):
    registry = MapRegistry()
    registry.register("world", world_geometry)
    pairs = [{"name": name, "value": 1000} for name in
             ("United States", "Germany", "Korea", "China", "Chad")]
    fig = global_map_figure(pairs, registry)
    assert len(fig.data) == 1
    assert list(fig.data[0].z) == [2] * 5
    assert "Confirmed: 1,000" in fig.data[0].text[0]
