"""
COVID-19 Statistics Dashboard

Single-page dashboard over two public snapshots:
  1. Overview: confirmed / suspected / cured / death totals for the
     domestic breakdown, the rest of the world and the globe
  2. Maps: confirmed cases worldwide (with the province breakdown
     rolled into one country) and cases per 1M people
  3. Table: every country, sortable, most confirmed first

All panels are rebuilt on every refresh; a panel whose source fails keeps
showing the last data it loaded.

Launch:
    python dashboard.py
    Open http://localhost:8050
"""

import logging
import os

import dash
from dash import dcc, html, Input, Output, callback, dash_table

from dashboard_session import DashboardState, run_once
from map_presentation import (MapRegistry, global_map_figure, loading_figure,
                              per_million_figure, unavailable_figure)
from view_builders import TABLE_COLUMNS

logger = logging.getLogger(__name__)

# ── App setup ──────────────────────────────────────────────────────────

app = dash.Dash(__name__, title="COVID-19 Dashboard",
                suppress_callback_exceptions=True)

PORT = int(os.environ.get("PORT", "8050"))
REFRESH_MINUTES = int(os.environ.get("COVID_REFRESH_MINUTES", "30"))

# Geometry is registered here once for the whole process
MAP_REGISTRY = MapRegistry()

# Last successfully loaded value of every slot; a failed fetch keeps showing these
LAST_STATE = DashboardState()

SLOT_LABELS = {
    "totals": "totals",
    "global_map": "confirmed-case map",
    "table": "country table",
    "per_million_map": "per-million map",
}

TOLL_COLORS = {
    "confirmed": "#ef1717",
    "suspect": "#f39c12",
    "cured": "#27ae60",
    "death": "#121010",
    "fatality": "#8e44ad",
}

TABLE_HEADERS = {
    "name": "Country",
    "confirmed": "Confirmed",
    "current_confirmed": "Active",
    "suspected": "Suspected",
    "cured": "Cured",
    "dead": "Deaths",
}

PANELS = [
    ("overall", "Global"),
    ("domestic", "China"),
    ("foreign", "Rest of World"),
]


# ── Helper: info icon with hover tooltip ──────────────────────────────

def info_icon(tooltip):
    """Small circled (i) that shows a tooltip on hover."""
    return html.Span(
        "i",
        title=tooltip,
        style={
            "display": "inline-flex", "alignItems": "center",
            "justifyContent": "center", "width": "16px", "height": "16px",
            "borderRadius": "50%", "backgroundColor": "#95a5a6",
            "color": "white", "fontSize": "10px", "fontStyle": "italic",
            "fontWeight": "bold", "marginLeft": "6px", "cursor": "help",
            "verticalAlign": "middle", "userSelect": "none",
        },
    )


def stat_card(label, value, color="#2c3e50", tooltip=""):
    """Small stat card with optional tooltip."""
    if isinstance(value, int):
        value = f"{value:,}"
    children = [
        html.Div(str(value), style={"fontSize": "20px", "fontWeight": "bold", "color": color}),
        html.Div([
            html.Span(label, style={"fontSize": "11px", "opacity": "0.7"}),
            info_icon(tooltip) if tooltip else None,
        ]),
    ]
    return html.Div(children, style={
        "padding": "8px 14px", "backgroundColor": "#fff",
        "borderRadius": "6px", "border": f"2px solid {color}",
        "textAlign": "center", "minWidth": "90px",
    })


def toll_panel(title, rollup):
    """One row of stat cards for a Rollup."""
    if rollup is None:
        return html.Div(f"{title}: no data", style={"color": "#999", "fontSize": "13px"})
    return html.Div([
        html.H4(title, style={"margin": "0 0 6px 0"}),
        html.Div([
            stat_card("Confirmed", rollup.confirmed, TOLL_COLORS["confirmed"]),
            stat_card("Suspected", rollup.suspect, TOLL_COLORS["suspect"]),
            stat_card("Cured", rollup.cured, TOLL_COLORS["cured"]),
            stat_card("Death", rollup.death, TOLL_COLORS["death"]),
            stat_card("Fatality", rollup.fatality, TOLL_COLORS["fatality"],
                      tooltip="Deaths / (confirmed + cured)"),
        ], style={"display": "flex", "gap": "8px", "flexWrap": "wrap"}),
    ], style={"marginBottom": "12px"})


# ══════════════════════════════════════════════════════════════════════
#  MAIN LAYOUT
# ══════════════════════════════════════════════════════════════════════

app.layout = html.Div([
    # Header
    html.Div([
        html.H1("COVID-19 Statistics",
                style={"margin": "0", "fontSize": "22px"}),
        html.P(id="update-time",
               style={"margin": "0", "fontSize": "12px", "opacity": "0.7"}),
    ], style={"padding": "12px 20px", "backgroundColor": "#2c3e50",
              "color": "white"}),

    dcc.Interval(id="refresh", interval=REFRESH_MINUTES * 60 * 1000, n_intervals=0),

    html.Div([
        # Overview
        dcc.Loading(html.Div(id="overview"), type="dot"),

        # Maps
        html.Div([
            html.Div([dcc.Loading(dcc.Graph(id="global-map", figure=loading_figure(),
                                            style={"height": "480px"}))],
                     style={"flex": "1", "minWidth": "420px"}),
            html.Div([dcc.Loading(dcc.Graph(id="per-million-map", figure=loading_figure(),
                                            style={"height": "480px"}))],
                     style={"flex": "1", "minWidth": "420px"}),
        ], style={"display": "flex", "gap": "10px", "flexWrap": "wrap"}),

        # Table
        html.Div([
            dash_table.DataTable(
                id="country-table",
                columns=[{"name": TABLE_HEADERS[c], "id": c} for c in TABLE_COLUMNS],
                data=[],
                sort_action="native",
                page_size=25,
                style_header={"backgroundColor": "#2c3e50", "color": "white",
                              "fontWeight": "bold", "fontSize": "12px", "padding": "8px"},
                style_cell={"textAlign": "center", "padding": "6px", "fontSize": "12px",
                            "border": "1px solid #ddd"},
            ),
        ], style={"marginTop": "15px"}),

        html.Div(id="status",
                 style={"marginTop": "10px", "fontSize": "13px", "color": "#666"}),
    ], style={"padding": "15px", "overflowY": "auto",
              "height": "calc(100vh - 70px)"}),

], style={"fontFamily": "system-ui, -apple-system, sans-serif",
          "backgroundColor": "#f8f9fa", "height": "100vh", "overflow": "hidden"})


# ══════════════════════════════════════════════════════════════════════
#  CALLBACKS
# ══════════════════════════════════════════════════════════════════════

def carry_forward(state, previous):
    """Fill the slots a failed fetch left empty from the last good values.

    Slots that did load are remembered in `previous` for the next refresh.
    Returns the slots that now show previous data.
    """
    stale = []
    for slot in SLOT_LABELS:
        if state[slot] is not None:
            previous(slot, state[slot])
        elif previous[slot] is not None:
            state(slot, previous[slot])
            stale.append(slot)
    return stale


def render_state(state, registry, stale=()):
    """Dash outputs for one finished fetch cycle."""
    totals = state["totals"]
    problems = []

    if totals is None or "totals" in stale:
        problems.append("area snapshot")
    if totals is None:
        overview = html.Div("Could not load the area snapshot.", style={"color": "#999"})
        update_time = ""
    else:
        overview = html.Div([toll_panel(title, getattr(totals, key))
                             for key, title in PANELS])
        update_time = f"Updated {totals.update_time}" if totals.update_time else ""

    if not registry.is_registered():
        problems.append("world geometry")

    if state["global_map"] is None:
        global_fig = unavailable_figure("No confirmed-case data")
    else:
        global_fig = global_map_figure(state["global_map"], registry)

    if state["per_million_map"] is None or "per_million_map" in stale:
        problems.append("countries snapshot")
    if state["per_million_map"] is None:
        per_million_fig = unavailable_figure("No per-million data")
    else:
        per_million_fig = per_million_figure(state["per_million_map"], registry)

    rows = [row.as_dict() for row in state["table"] or []]

    if problems:
        status = "Partial data: could not load " + ", ".join(problems) + "."
        if stale:
            status += " Showing previous data for " + ", ".join(
                SLOT_LABELS[slot] for slot in stale) + "."
    else:
        status = f"Loaded {len(rows)} countries."
    return overview, update_time, global_fig, per_million_fig, rows, status


@callback(
    Output("overview", "children"),
    Output("update-time", "children"),
    Output("global-map", "figure"),
    Output("per-million-map", "figure"),
    Output("country-table", "data"),
    Output("status", "children"),
    Input("refresh", "n_intervals"),
)
def refresh_dashboard(n_intervals):
    state = run_once(MAP_REGISTRY)
    stale = carry_forward(state, LAST_STATE)
    outputs = render_state(state, MAP_REGISTRY, stale)
    logger.info("Refresh %d: %s", n_intervals, outputs[-1])
    return outputs


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("Starting COVID-19 Dashboard...")
    print(f"Open http://localhost:{PORT} in your browser")
    app.run(debug=False, port=PORT)
