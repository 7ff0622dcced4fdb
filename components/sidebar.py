"""
components/sidebar.py
Left sidebar: API token entry, the price page picker and the balance form.
Every action is handed to the background loop; nothing here waits on the
network.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from dash import Input, Output, State, dcc, html, no_update
from dash.exceptions import PreventUpdate

from data.state import BalanceConfig, PriceConfig, View

logger = logging.getLogger(__name__)

DEFAULT_LIMIT   = 10
DEFAULT_OFFSET  = 0
DEFAULT_NETWORK = "bitcoin"


def _filter_block(title: str, children) -> html.Div:
    """Wrap a control in a labeled section block."""
    return html.Div(className="filter-block", children=[
        html.Div(title, className="filter-title"),
        *([children] if not isinstance(children, list) else children),
    ])


def build_sidebar() -> html.Div:
    """Build the left sidebar with the token, price and balance controls."""
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")

    return html.Div(id="sidebar", children=[

        # ── Token ─────────────────────────────────────────────
        _filter_block("API TOKEN", [
            dcc.Input(
                id="input-token",
                type="password",
                placeholder="Bearer token...",
                debounce=True,
                className="sidebar-input",
            ),
            html.Button("Save token", id="btn-save-token", className="sidebar-button", n_clicks=0),
            html.Div(id="token-status", className="sidebar-status"),
            html.Div(id="token-hint", className="sidebar-hint"),
        ]),

        # ── Price ─────────────────────────────────────────────
        _filter_block("LATEST BITCOIN PRICE", [
            dcc.DatePickerSingle(
                id="price-date",
                date=today,
                max_date_allowed=today,
                display_format="YYYY-MM-DD",
                className="dark-datepicker",
            ),
            html.Button("Show price", id="btn-price", className="sidebar-button", n_clicks=0),
        ]),

        # ── Balance ───────────────────────────────────────────
        _filter_block("BITCOIN BALANCE", [
            html.Div(className="input-row", children=[
                dcc.Input(id="balance-limit", type="number", min=1, step=1,
                          value=DEFAULT_LIMIT, placeholder="Limit", className="sidebar-input"),
                dcc.Input(id="balance-offset", type="number", min=0, step=1,
                          value=DEFAULT_OFFSET, placeholder="Offset", className="sidebar-input"),
            ]),
            dcc.Input(id="balance-network", type="text", value=DEFAULT_NETWORK,
                      placeholder="Network", className="sidebar-input"),
            dcc.Input(id="balance-address", type="text", placeholder="Bitcoin address",
                      className="sidebar-input"),
            html.Div(className="date-row", children=[
                dcc.DatePickerSingle(id="balance-from", placeholder="From",
                                     display_format="YYYY-MM-DD", className="dark-datepicker"),
                html.Span("→", className="date-arrow"),
                dcc.DatePickerSingle(id="balance-till", placeholder="Till",
                                     display_format="YYYY-MM-DD", className="dark-datepicker"),
            ]),
            html.Button("Check balance", id="btn-balance", className="sidebar-button", n_clicks=0),
            html.Div(id="balance-hint", className="sidebar-hint"),
        ]),

        html.Button("Home", id="btn-home", className="sidebar-button secondary", n_clicks=0),
        dcc.Store(id="store-price-ack"),
        dcc.Store(id="store-home-ack"),
    ])


def parse_balance_form(
    address: Optional[str],
    network: Optional[str] = None,
    limit=None,
    offset=None,
    from_date: Optional[str] = None,
    till_date: Optional[str] = None,
) -> BalanceConfig:
    """
    Turn raw form values into a BalanceConfig.

    Blank numbers fall back to the defaults (limit 10, offset 0) and a blank
    network to "bitcoin". Raises ValueError when the result is invalid.
    """
    return BalanceConfig(
        address=(address or "").strip(),
        network=(network or "").strip() or DEFAULT_NETWORK,
        limit=_whole_number(limit, DEFAULT_LIMIT),
        offset=_whole_number(offset, DEFAULT_OFFSET),
        from_date=from_date or None,
        till_date=till_date or None,
    )


def _whole_number(value, default: int) -> int:
    if value in (None, ""):
        return default
    number = float(value)
    if number != int(number):
        raise ValueError(f"expected a whole number, got {value}")
    return int(number)


# ── Callbacks ──────────────────────────────────────────────────────────────────

def register_callbacks(app, session, runner) -> None:
    """Wire the sidebar controls to the session via the background loop."""

    @app.callback(
        Output("token-hint", "children"),
        Input("btn-save-token", "n_clicks"),
        State("input-token", "value"),
        prevent_initial_call=True,
    )
    def save_token(n_clicks, token):
        if not n_clicks:
            raise PreventUpdate
        if not (token or "").strip():
            return "Enter a token first."
        runner.call(session.set_credential, token)
        return ""

    @app.callback(
        Output("store-price-ack", "data"),
        Input("btn-price", "n_clicks"),
        State("price-date", "date"),
        prevent_initial_call=True,
    )
    def show_price(n_clicks, day):
        if not n_clicks:
            raise PreventUpdate
        config = PriceConfig(day) if day else PriceConfig()
        runner.submit(session.select_view(View.PRICE, config))
        return no_update

    @app.callback(
        Output("balance-hint", "children"),
        Input("btn-balance", "n_clicks"),
        State("balance-address", "value"),
        State("balance-network", "value"),
        State("balance-limit",   "value"),
        State("balance-offset",  "value"),
        State("balance-from",    "date"),
        State("balance-till",    "date"),
        prevent_initial_call=True,
    )
    def check_balance(n_clicks, address, network, limit, offset, from_date, till_date):
        if not n_clicks:
            raise PreventUpdate
        try:
            config = parse_balance_form(address, network, limit, offset, from_date, till_date)
        except (TypeError, ValueError) as e:
            logger.info(f"Balance form rejected: {e}")
            return f"Invalid input: {e}"
        runner.submit(session.select_view(View.BALANCE, config))
        return ""

    @app.callback(
        Output("store-home-ack", "data"),
        Input("btn-home", "n_clicks"),
        prevent_initial_call=True,
    )
    def go_home(n_clicks):
        if not n_clicks:
            raise PreventUpdate
        runner.submit(session.select_view(View.NONE))
        return no_update
