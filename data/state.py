"""
data/state.py
Session state: the single authoritative snapshot the dashboard renders from.
The store is constructed once in app.py and handed to whoever needs it;
every change goes through one of the six named transitions below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)


class View(str, Enum):
    NONE = "none"
    PRICE = "price"
    BALANCE = "balance"


class Status(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


# ── View configuration ─────────────────────────────────────────────────────────

def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class PriceConfig:
    """Configuration for the price view: one calendar day."""

    date: Union[str, date] = field(default_factory=_today)


@dataclass(frozen=True)
class BalanceConfig:
    """
    Configuration for the balance view.

    Dates are optional calendar days ("YYYY-MM-DD"); None means unbounded.
    limit/offset describe the page the user asked for and are echoed back in
    the balance view.
    """

    address: str
    network: str = "bitcoin"
    limit: int = 10
    offset: int = 0
    from_date: Optional[Union[str, date]] = None
    till_date: Optional[Union[str, date]] = None

    def __post_init__(self):
        if not self.address or not self.address.strip():
            raise ValueError("address is required")
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")


ViewConfig = Union[PriceConfig, BalanceConfig]


# ── Snapshot ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SessionState:
    credential: Optional[str] = field(default=None, repr=False)
    active_view: View = View.NONE
    view_config: Optional[ViewConfig] = None
    status: Status = Status.IDLE
    result: Optional[dict[str, Any]] = None
    error_message: Optional[str] = None
    last_updated: Optional[datetime] = None
    revision: int = 0

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)

    @property
    def has_data(self) -> bool:
        return self.result is not None

    @property
    def is_home(self) -> bool:
        return self.active_view is View.NONE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Owns the SessionState snapshot.

    Snapshots are immutable: each transition builds a new one, so a reader
    holding an old snapshot never sees it change underneath. Transitions are
    total: they never raise, whatever the current status is.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._state = SessionState()

    def get_state(self) -> SessionState:
        return self._state

    def _apply(self, transition: str, **changes) -> None:
        self._state = replace(self._state, revision=self._state.revision + 1, **changes)
        logger.debug(
            f"{transition} → status={self._state.status.value} "
            f"view={self._state.active_view.value} rev={self._state.revision}"
        )

    # ── Transitions ────────────────────────────────────────────────────────────

    def set_credential(self, token: Optional[str]) -> None:
        self._apply(
            "set_credential",
            credential=token,
            result=None,
            error_message=None,
            last_updated=None,
            status=Status.IDLE,
        )

    def set_view(self, view: View, config: Optional[ViewConfig] = None) -> None:
        self._apply(
            "set_view",
            active_view=view,
            view_config=config,
            result=None,
            error_message=None,
            last_updated=None,
            status=Status.IDLE,
        )

    def begin_load(self) -> None:
        self._apply("begin_load", status=Status.LOADING, error_message=None, result=None)

    def succeed(self, payload: dict[str, Any]) -> None:
        self._apply(
            "succeed",
            result=payload,
            status=Status.LOADED,
            error_message=None,
            last_updated=self._clock(),
        )

    def fail(self, message: str) -> None:
        self._apply("fail", error_message=message, status=Status.ERRORED, result=None)

    def reset(self) -> None:
        self._apply(
            "reset",
            result=None,
            error_message=None,
            status=Status.IDLE,
            last_updated=None,
        )
