"""
Plotly figures for the world maps.

Turns map view models into choropleth figures drawn on a GeoJSON world
geometry registered once per process in a MapRegistry. Shading is piecewise:
values are bucketed by fixed breakpoints and the bucket index is colored on a
four-stop red scale.
"""

import threading

import numpy as np
import plotly.graph_objects as go

WORLD_MAP_ID = "world"
FEATURE_ID_KEY = "properties.name"

# Lower bounds, most severe first: >=1000, 500-999, 200-499, 50-199, 0-49
INTENSITY_PIECES = [1000, 500, 200, 50, 0]
# Same shape for raw confirmed counts on the breakdown map
CONFIRMED_PIECES = [100_000, 10_000, 1_000, 100, 0]

COLOR_TIERS = ["#ffc0b1", "#ff8c71", "#ef1717", "#9c0505"]
NO_DATA_COLOR = "#B2E5BC"
EMPHASIS_COLOR = "#53adf3"
BORDER_COLOR = "rgba(0, 0, 0, 0.2)"
NO_CASE = "No Case"
LOADING_TEXT = "Data Loading ..."

PER_MILLION_TITLE = "Cases by country (clickable) Worldwide"
PER_MILLION_SUBTITLE = "Data from https://www.worldometers.info/coronavirus/"
PER_MILLION_LEGEND = ["Outbreak", "Cases per 1M people"]
GLOBAL_TITLE = "Confirmed cases Worldwide"
GLOBAL_SUBTITLE = "Data from https://lab.isaaclin.cn/nCoV/"
GLOBAL_LEGEND = ["Outbreak", "Confirmed cases"]


class MapRegistry:
    """Geometry documents by map id, each registered at most once.

    The dashboard owns one instance for the life of the process and hands it
    to every session and figure builder.
    """

    def __init__(self):
        self._maps = {}
        self._lock = threading.Lock()

    def register(self, map_id, geometry):
        """Register `geometry` under `map_id`. Returns False if already registered."""
        with self._lock:
            if map_id in self._maps:
                return False
            self._maps[map_id] = geometry
            return True

    def is_registered(self, map_id=WORLD_MAP_ID):
        return map_id in self._maps

    def get(self, map_id=WORLD_MAP_ID):
        return self._maps.get(map_id)


def intensity_bucket(value, pieces=INTENSITY_PIECES):
    """Bucket index for `value`: 0 for the lowest piece, len(pieces) - 1 for the highest."""
    top = len(pieces) - 1
    for i, lower in enumerate(pieces):
        if value >= lower:
            return top - i
    return 0


def bucket_labels(pieces=INTENSITY_PIECES):
    """Legend labels ordered from the lowest bucket up, e.g. "0-49", ..., "≥1000"."""
    labels = [f"≥{pieces[0]:,}"]
    for lower, upper in zip(pieces[1:], pieces[:-1]):
        labels.append(f"{lower:,}-{upper - 1:,}")
    return labels[::-1]


def colorscale(colors=COLOR_TIERS):
    return [[float(pos), color] for pos, color in zip(np.linspace(0, 1, len(colors)), colors)]


def format_count(value):
    """1234567 -> "1,234,567"; also accepts numeric strings. Missing -> "0"."""
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        try:
            value = float(value)
        except ValueError:
            return value or "0"
    if value is None or value != value:
        return "0"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def format_tooltip(name, value=None, entry=None):
    """Hover text for one region.

    Without an entry only the value is shown, or "No Case" when there is none.
    """
    if entry is None:
        shown = format_count(value) if value else NO_CASE
        return f"<b>{name}</b><br>Confirmed: {shown}"

    return "<br>".join([
        f"<b>{name}</b>",
        f"Per 1M ppl: {format_count(value)}",
        f"Confirmed: {format_count(entry.confirmed_count)}",
        f"Active: {format_count(entry.active_count)}",
        f"Cured: {format_count(entry.cured_count)}",
        f"Death: {format_count(entry.dead_count)}",
        f"Lethality: {entry.lethality}",
    ])


def _message_figure(text):
    fig = go.Figure()
    fig.add_annotation(text=text, x=0.5, y=0.5, xref="paper", yref="paper",
                       showarrow=False, font={"size": 16, "color": "#666"})
    fig.update_layout(xaxis={"visible": False}, yaxis={"visible": False},
                      plot_bgcolor="white", margin=dict(l=10, r=10, t=10, b=10))
    return fig


def loading_figure():
    """Placeholder shown until the geometry and the first fetch are in."""
    return _message_figure(LOADING_TEXT)


def unavailable_figure(reason="Map geometry unavailable"):
    return _message_figure(reason)


def _feature_names(geometry):
    names = []
    for feature in geometry.get("features", []):
        name = (feature.get("properties") or {}).get("name")
        if name:
            names.append(name)
    return names


def choropleth_figure(names, values, hover_texts, registry, title, subtitle,
                      legend_text, pieces=INTENSITY_PIECES, map_id=WORLD_MAP_ID):
    """Piecewise-shaded choropleth on the registered geometry.

    Countries of the geometry with no data are drawn in the default area
    color with a "No Case" tooltip.
    """
    geometry = registry.get(map_id)
    if geometry is None:
        return unavailable_figure()

    labels = bucket_labels(pieces)
    buckets = [intensity_bucket(value, pieces) for value in values]

    fig = go.Figure()

    with_data = set(names)
    missing = [name for name in _feature_names(geometry) if name not in with_data]
    if missing:
        fig.add_trace(go.Choropleth(
            geojson=geometry, featureidkey=FEATURE_ID_KEY,
            locations=missing, z=[0] * len(missing),
            colorscale=[[0, NO_DATA_COLOR], [1, NO_DATA_COLOR]], showscale=False,
            text=[format_tooltip(name) for name in missing],
            hovertemplate="%{text}<extra></extra>",
            marker_line_color=BORDER_COLOR, marker_line_width=0.5,
            name="no-data",
        ))

    fig.add_trace(go.Choropleth(
        geojson=geometry, featureidkey=FEATURE_ID_KEY,
        locations=list(names), z=buckets, customdata=list(values),
        zmin=0, zmax=len(pieces) - 1,
        colorscale=colorscale(),
        colorbar=dict(
            title=" / ".join(legend_text),
            tickvals=list(range(len(labels))),
            ticktext=labels,
            orientation="h", y=1.02, yanchor="bottom", len=0.6, thickness=10,
        ),
        text=list(hover_texts),
        hovertemplate="%{text}<extra></extra>",
        marker_line_color=BORDER_COLOR, marker_line_width=0.5,
        selected={"marker": {"opacity": 1.0}},
        unselected={"marker": {"opacity": 0.6}},
        name="cases",
    ))

    fig.update_geos(visible=False, showcountries=False, fitbounds="geojson",
                    projection_type="natural earth")
    fig.update_layout(
        title={"text": f"{title}<br><sup>{subtitle}</sup>", "x": 0.5,
               "font": {"size": 18}},
        hoverlabel={"bgcolor": EMPHASIS_COLOR},
        clickmode="event+select",
        margin=dict(l=10, r=10, t=90, b=10),
    )
    return fig


def per_million_figure(entries, registry):
    """Cases-per-million map from MapEntries."""
    return choropleth_figure(
        names=[entry.name for entry in entries],
        values=[entry.value for entry in entries],
        hover_texts=[format_tooltip(entry.name, entry.value, entry) for entry in entries],
        registry=registry,
        title=PER_MILLION_TITLE,
        subtitle=PER_MILLION_SUBTITLE,
        legend_text=PER_MILLION_LEGEND,
    )


def global_map_figure(pairs, registry):
    """Confirmed-cases map from {name, value} pairs."""
    return choropleth_figure(
        names=[pair["name"] for pair in pairs],
        values=[pair["value"] for pair in pairs],
        hover_texts=[format_tooltip(pair["name"], pair["value"]) for pair in pairs],
        registry=registry,
        title=GLOBAL_TITLE,
        subtitle=GLOBAL_SUBTITLE,
        legend_text=GLOBAL_LEGEND,
        pieces=CONFIRMED_PIECES,
    )
