"""
components/panels.py
Main content area: home / loading / error panels, the dispatcher that picks
one from the session snapshot, and the polling + refresh callbacks.
"""

from __future__ import annotations

import logging

from dash import Input, Output, State, dcc, html, no_update
from dash.exceptions import PreventUpdate

from data.process import format_updated
from data.state import SessionState, Status, View

logger = logging.getLogger(__name__)

MUTED     = "#7a90b0"
ERROR_RED = "#ef4444"

POLL_INTERVAL_MS = 500

VIEW_TITLES = {
    View.NONE:    "Bitcoin Monitor",
    View.PRICE:   "Latest Bitcoin Price",
    View.BALANCE: "Bitcoin Balance",
}


def refresh_button(button_id: str, label: str = "Refresh") -> html.Button:
    return html.Button(
        label,
        id=button_id,
        className="action-button",
        n_clicks=0,
    )


def build_home_panel(state: SessionState) -> html.Div:
    hint = (
        "Pick a page from the sidebar to start."
        if state.has_credential
        else "Configure your BitQuery access token in the sidebar to start."
    )
    return html.Div(className="panel home-panel", children=[
        html.Div("₿", className="home-logo"),
        html.H2("Bitcoin Monitor"),
        html.P(hint, style={"color": MUTED}),
        html.Ul([
            html.Li("Configure the BitQuery API token"),
            html.Li("Choose Latest Bitcoin Price or Bitcoin Balance"),
            html.Li("Use Refresh to pull fresh numbers"),
        ]),
    ])


def build_loading_panel(state: SessionState) -> html.Div:
    what = "address data" if state.active_view is View.BALANCE else "Bitcoin price"
    return html.Div(className="panel loading-panel", children=[
        html.Div(className="spinner"),
        html.Span(f"Loading {what}...", style={"color": MUTED}),
    ])


def build_error_panel(state: SessionState) -> html.Div:
    return html.Div(className="panel error-panel", children=[
        html.H3("Could not load data", style={"color": ERROR_RED}),
        html.P(state.error_message or "Unknown error", className="error-message"),
        refresh_button("btn-retry", "Try again"),
    ])


def render_main(state: SessionState):
    """Route the snapshot to the panel that should be on screen."""
    from components.price   import build_price_view
    from components.balance import build_balance_view

    if state.is_home:
        return build_home_panel(state)
    if state.status is Status.LOADING:
        return build_loading_panel(state)
    if state.status is Status.ERRORED:
        return build_error_panel(state)
    if state.status is Status.LOADED:
        dispatch = {
            View.PRICE:   build_price_view,
            View.BALANCE: build_balance_view,
        }
        return dispatch[state.active_view](state)
    # idle with a view selected: the load is about to start
    return build_loading_panel(state)


def build_main_area() -> html.Div:
    return html.Div(id="main-content", children=[
        html.Div(id="main-header", children=[
            html.H1(VIEW_TITLES[View.NONE], id="view-title"),
            html.Span(id="last-updated", className="last-updated"),
            refresh_button("btn-refresh"),
        ]),
        html.Div(id="view-content", className="view-content"),
        dcc.Interval(id="state-poll", interval=POLL_INTERVAL_MS),
        dcc.Store(id="store-revision", data=-1),
        dcc.Store(id="store-refresh-ack"),
        dcc.Store(id="store-retry-ack"),
    ])


# ── Callbacks ──────────────────────────────────────────────────────────────────

def register_callbacks(app, session, runner) -> None:
    """Wire the main area to an explicitly constructed session and loop."""

    @app.callback(
        Output("view-content",   "children"),
        Output("view-title",     "children"),
        Output("last-updated",   "children"),
        Output("token-status",   "children"),
        Output("store-revision", "data"),
        Input("state-poll", "n_intervals"),
        State("store-revision", "data"),
    )
    def sync_view(_n_intervals, rendered_revision):
        """Re-render only when the snapshot has moved on."""
        state = session.get_state()
        if state.revision == rendered_revision:
            raise PreventUpdate
        token_status = "Token configured" if state.has_credential else "No token"
        return (
            render_main(state),
            VIEW_TITLES[state.active_view],
            format_updated(state.last_updated),
            token_status,
            state.revision,
        )

    def _refresh(source: str, n_clicks) -> None:
        if not n_clicks:
            raise PreventUpdate
        logger.info(f"Refresh requested from {source}.")
        runner.submit(session.refresh())

    @app.callback(
        Output("store-refresh-ack", "data"),
        Input("btn-refresh", "n_clicks"),
        prevent_initial_call=True,
    )
    def refresh_clicked(n_clicks):
        _refresh("header", n_clicks)
        return no_update

    @app.callback(
        Output("store-retry-ack", "data"),
        Input("btn-retry", "n_clicks"),
        prevent_initial_call=True,
    )
    def retry_clicked(n_clicks):
        """The retry button only exists while the error panel is shown."""
        _refresh("error panel", n_clicks)
        return no_update
