"""
components/price.py
Price view — the day's on-chain output volume in BTC and USD, and the
implied BTC/USD price.
"""

from __future__ import annotations

from dash import html

from data.process import format_btc, format_usd, summarize_price
from data.state import PriceConfig, SessionState

GOLD  = "#f7931a"
GREEN = "#22c55e"
MUTED = "#7a90b0"
TEXT_COLOR = "#e2e8f0"


def _card(label: str, value: str, sub: str = "", color: str = TEXT_COLOR) -> html.Div:
    return html.Div(className="stat-card", style={"minWidth": "200px", "flex": "1"}, children=[
        html.Div(label, className="stat-card-label"),
        html.Div(value, className="stat-card-value", style={"color": color}),
        html.Div(sub,   className="stat-card-sub"),
    ])


def build_price_view(state: SessionState) -> html.Div:
    """
    Build the price view from a loaded snapshot.

    Args:
        state: Snapshot with status LOADED and a PriceConfig.

    Returns:
        html.Div with the price card row, or a notice when the provider
        had no outputs for the day.
    """
    config = state.view_config
    day = config.date if isinstance(config, PriceConfig) else ""
    summary = summarize_price(state.result)

    if summary["btc_volume"] is None and summary["usd_volume"] is None:
        return html.Div(className="panel notice-panel", children=[
            html.H3("No data found", style={"color": GOLD}),
            html.P(f"The provider returned no outputs for {day}.", style={"color": MUTED}),
        ])

    return html.Div([
        html.Div(
            id="price-cards",
            style={"display": "flex", "gap": "12px", "flexWrap": "wrap", "marginBottom": "16px"},
            children=[
                _card("BTC / USD", format_usd(summary["price_usd"]), f"Implied price on {day}", GREEN),
                _card("Volume (BTC)", format_btc(summary["btc_volume"]), "Sum of outputs"),
                _card("Volume (USD)", format_usd(summary["usd_volume"]), "Valued at the day's rate"),
            ],
        ),
        html.Div(className="disclaimer", children=[
            html.Strong("Note: "),
            "The price is the USD value of the day's Bitcoin outputs divided by their BTC value, "
            "as reported by the BitQuery API. It can differ from exchange prices.",
        ]),
    ])
