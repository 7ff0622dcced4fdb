"""
app.py — Bitcoin Monitor Dashboard
Entry point. Builds the session objects, defines the layout, wires callbacks.
Keep this file thin — the fetch/state logic lives in data/, the views in components/.
"""

import atexit
import logging

from dash import Dash, html

from data.fetch import BITQUERY_TOKEN, BitqueryTransport, FetchOrchestrator
from data.runner import BackgroundLoop
from data.session import DashboardSession
from data.state import SessionStore

import components.panels  as panels
import components.sidebar as sidebar

logger = logging.getLogger(__name__)

# ══════════════════════════════════════════════════════════════════════════════
# SESSION
# ══════════════════════════════════════════════════════════════════════════════

transport    = BitqueryTransport()
store        = SessionStore()
orchestrator = FetchOrchestrator(store, transport)
session      = DashboardSession(store, orchestrator)
runner       = BackgroundLoop().start()

if BITQUERY_TOKEN:
    logger.info("Using BITQUERY_API_TOKEN from environment.")
    runner.call(session.set_credential, BITQUERY_TOKEN).result()


def _shutdown() -> None:
    if runner.running:
        runner.call(session.teardown).result()
    runner.stop()
    transport.close()


atexit.register(_shutdown)

# ══════════════════════════════════════════════════════════════════════════════
# APP
# ══════════════════════════════════════════════════════════════════════════════

app = Dash(
    __name__,
    title="Bitcoin Monitor",
    suppress_callback_exceptions=True,
)

# ══════════════════════════════════════════════════════════════════════════════
# LAYOUT
# ══════════════════════════════════════════════════════════════════════════════

app.layout = html.Div(id="app-wrapper", children=[

    # ── Header ────────────────────────────────────────────────────
    html.Div(id="header", children=[
        html.Div(id="header-left", children=[
            html.Span("BITCOIN MONITOR", id="header-logo"),
            html.Span("On-chain price and address balances", id="header-subtitle"),
        ]),
    ]),

    # ── Body ──────────────────────────────────────────────────────
    html.Div(id="body-layout", children=[
        sidebar.build_sidebar(),
        panels.build_main_area(),
    ]),

    # ── Footer ────────────────────────────────────────────────────
    html.Div(id="footer", children=[
        html.Span("Data: BitQuery GraphQL API"),
        html.Span("Not financial advice"),
    ]),
])

# ══════════════════════════════════════════════════════════════════════════════
# CALLBACKS
# ══════════════════════════════════════════════════════════════════════════════

sidebar.register_callbacks(app, session, runner)
panels.register_callbacks(app, session, runner)

# ══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT
# ══════════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    app.run(debug=True, host="127.0.0.1", port=8050)
