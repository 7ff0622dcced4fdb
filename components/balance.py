"""
components/balance.py
Balance view — what an address received and sent, its net balance, and a
Received vs Sent bar chart.
"""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
from dash import dcc, html

from data.process import (
    balance_totals,
    format_btc,
    format_timestamp,
    format_usd,
    summarize_balance,
)
from data.state import BalanceConfig, SessionState

CHART_BG   = "#06090f"
PAPER_BG   = "#06090f"
GRID_COLOR = "#1e2a36"
TEXT_COLOR = "#e2e8f0"
GREEN      = "#22c55e"
RED        = "#ef4444"
MUTED      = "#7a90b0"


def build_balance_view(state: SessionState) -> html.Div:
    """
    Build the balance view from a loaded snapshot.

    Args:
        state: Snapshot with status LOADED and a BalanceConfig.

    Returns:
        html.Div with address info, stat cards, the flow chart and page info.
    """
    config = state.view_config
    if not isinstance(config, BalanceConfig):
        return html.Div("No address selected.", style={"color": MUTED})

    frame = summarize_balance(state.result)
    totals = balance_totals(frame)

    return html.Div([
        _address_info(config),
        html.Div(
            id="balance-stats-row",
            style={"display": "flex", "gap": "12px", "marginBottom": "16px", "flexWrap": "wrap"},
            children=_build_summary_stats(frame, totals),
        ),
        dcc.Graph(
            id="balance-flow-chart",
            config={"displayModeBar": False},
            style={"height": "320px"},
            figure=make_flow_chart(frame),
        ),
        html.Div(className="page-info", style={"color": MUTED}, children=[
            html.Span(f"Page offset {config.offset}"),
            html.Span(f"Limit per page: {config.limit}"),
        ]),
    ])


def _address_info(config: BalanceConfig) -> html.Div:
    period = f"{config.from_date or 'beginning'} → {config.till_date or 'now'}"
    return html.Div(className="address-info", children=[
        html.Div([html.Span("Address: ", className="info-label"),
                  html.Code(config.address, className="address")]),
        html.Div([html.Span("Network: ", className="info-label"), config.network]),
        html.Div([html.Span("Period: ",  className="info-label"), period]),
    ])


def _build_summary_stats(frame: pd.DataFrame, totals: dict) -> list:
    """Build the row of stat cards above the chart."""

    def card(label: str, value: str, sub: str = "") -> html.Div:
        return html.Div(className="stat-card", style={"minWidth": "160px", "flex": "1"}, children=[
            html.Div(label, className="stat-card-label"),
            html.Div(value, className="stat-card-value"),
            html.Div(sub,   className="stat-card-sub"),
        ])

    received, sent = frame.loc["Received"], frame.loc["Sent"]
    return [
        card("Balance",  format_btc(totals["balance_btc"]), format_usd(totals["balance_usd"])),
        card("Received", format_btc(received["value"]), f"{int(received['count']):,} outputs"),
        card("Sent",     format_btc(sent["value"]),     f"{int(sent['count']):,} inputs"),
        card("First seen", format_timestamp(totals["first_seen"])),
        card("Last seen",  format_timestamp(totals["last_seen"])),
    ]


def make_flow_chart(frame: pd.DataFrame) -> go.Figure:
    """
    Bar chart of USD value received vs sent by the address.

    Args:
        frame: Table from summarize_balance().

    Returns:
        Plotly Figure.
    """
    if frame["count"].sum() == 0:
        return _empty_fig("No transactions found for this address.")

    fig = go.Figure(go.Bar(
        x=frame.index.tolist(),
        y=frame["value_usd"],
        marker_color=[GREEN, RED],
        customdata=frame[["value", "count"]].values,
        hovertemplate=(
            "<b>%{x}</b><br>"
            "USD: $%{y:,.2f}<br>"
            "BTC: %{customdata[0]:.8f}<br>"
            "Transactions: %{customdata[1]}"
            "<extra></extra>"
        ),
    ))
    fig.update_layout(
        paper_bgcolor=PAPER_BG,
        plot_bgcolor=CHART_BG,
        font={"color": TEXT_COLOR, "family": "IBM Plex Mono, monospace", "size": 10},
        margin={"l": 60, "r": 20, "t": 10, "b": 40},
        yaxis={"title": "USD", "gridcolor": GRID_COLOR, "zeroline": False},
        xaxis={"gridcolor": GRID_COLOR},
    )
    return fig


def _empty_fig(message: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        paper_bgcolor=PAPER_BG,
        plot_bgcolor=CHART_BG,
        font={"color": TEXT_COLOR},
        annotations=[{
            "text": message,
            "xref": "paper", "yref": "paper",
            "x": 0.5, "y": 0.5,
            "showarrow": False,
            "font": {"size": 12, "color": MUTED},
        }],
    )
    return fig
