"""
data/session.py
The operations the dashboard's components are allowed to call. Components
read snapshots through get_state() and never touch the store or the
orchestrator directly.
"""

import logging
from typing import Optional

from data.fetch import FetchOrchestrator
from data.state import SessionState, SessionStore, View, ViewConfig

logger = logging.getLogger(__name__)


class DashboardSession:
    def __init__(self, store: SessionStore, orchestrator: FetchOrchestrator):
        self._store = store
        self._orchestrator = orchestrator

    def get_state(self) -> SessionState:
        return self._store.get_state()

    def set_credential(self, token: Optional[str]) -> None:
        """Store a new token. Any load made with the old one is abandoned."""
        token = (token or "").strip() or None
        self._orchestrator.cancel()
        self._store.set_credential(token)
        logger.info("Credential configured." if token else "Credential cleared.")

    async def select_view(self, view: View, config: Optional[ViewConfig] = None) -> None:
        """Switch to a view and load it. View.NONE returns to the home panel."""
        if view is View.NONE:
            self._orchestrator.cancel()
            self._store.set_view(View.NONE, None)
            return
        self._store.set_view(view, config)
        await self._orchestrator.load(view, config)

    async def refresh(self) -> None:
        """Reload the current view with its current configuration."""
        state = self._store.get_state()
        if state.active_view is View.NONE:
            logger.info("Refresh ignored: no view selected.")
            return
        await self._orchestrator.load(state.active_view, state.view_config)

    def teardown(self) -> None:
        self._orchestrator.cancel()
