"""
data/fetch.py
Handles all traffic to the BitQuery GraphQL API: query construction, date
normalization, the HTTP transport, and the orchestrator that runs one request
at a time and reports the outcome into the session store.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import date, datetime, timezone
from typing import Any, Optional, Protocol, Union

import requests
from dotenv import load_dotenv

from data.state import BalanceConfig, PriceConfig, SessionStore, View, ViewConfig

load_dotenv()  # loads BITQUERY_* settings from .env file

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ── Constants ──────────────────────────────────────────────────────────────────
BITQUERY_ENDPOINT = os.getenv("BITQUERY_ENDPOINT", "https://graphql.bitquery.io")
BITQUERY_TOKEN = os.getenv("BITQUERY_API_TOKEN", "")
REQUEST_TIMEOUT = float(os.getenv("BITQUERY_TIMEOUT", "30"))

CREDENTIAL_MISSING = "credential not configured"
EMPTY_RESPONSE = "empty response"

PRICE_QUERY = """
query GetBitcoinPrice($date: ISO8601DateTime!) {
  bitcoin {
    outputs(date: {is: $date}) {
      value
      usd: value(in: USD)
      expression(get: "usd/value")
    }
  }
}
"""

BALANCE_QUERY = """
query GetBitcoinBalance($network: BitcoinNetwork!, $address: String!, $from: ISO8601DateTime, $till: ISO8601DateTime) {
  bitcoin(network: $network) {
    inputs(date: {since: $from, till: $till}, inputAddress: {is: $address}) {
      count
      value
      value_usd: value(in: USD)
      min_date: minimum(of: date)
      max_date: maximum(of: date)
    }
    outputs(date: {since: $from, till: $till}, outputAddress: {is: $address}) {
      count
      value
      value_usd: value(in: USD)
      min_date: minimum(of: date)
      max_date: maximum(of: date)
    }
  }
}
"""


# ── Errors ─────────────────────────────────────────────────────────────────────

class FetchError(Exception):
    """A load failure; its message is what the user sees."""


class ConfigurationError(FetchError):
    """Nothing was sent: credential missing or view/config don't match."""


class TransportError(FetchError):
    """Non-2xx response or a network-level fault."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ProtocolError(FetchError):
    """HTTP succeeded but the body reports errors or carries no data."""


# ── Query construction ─────────────────────────────────────────────────────────

def normalize_datetime(value: Union[str, date, None]) -> Optional[str]:
    """
    Convert a calendar date to the provider's ISO8601DateTime scalar.

    Examples:
        "2024-01-15"            → "2024-01-15T00:00:00Z"
        "2024-01-15T12:00:00Z"  → "2024-01-15T12:00:00Z"  (unchanged)
        None / ""               → None  (unbounded)

    Args:
        value: "YYYY-MM-DD" string, full datetime string, date/datetime, or None.

    Returns:
        Datetime string, or None when the input is empty.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(value, date):
        return f"{value.isoformat()}T00:00:00Z"
    if "T" in value:
        return value
    return f"{value}T00:00:00Z"


def build_request(view: View, config: Optional[ViewConfig]) -> tuple[str, dict[str, Any]]:
    """
    Return (query, variables) for a view.

    Raises:
        ConfigurationError: no view selected, or config is the wrong type for the view.
    """
    if view is View.PRICE:
        if not isinstance(config, PriceConfig):
            raise ConfigurationError("price view requires a price configuration")
        return PRICE_QUERY, {"date": normalize_datetime(config.date)}

    if view is View.BALANCE:
        if not isinstance(config, BalanceConfig):
            raise ConfigurationError("balance view requires a balance configuration")
        return BALANCE_QUERY, {
            "network": config.network or "bitcoin",
            "address": config.address.strip(),
            "from": normalize_datetime(config.from_date),
            "till": normalize_datetime(config.till_date),
        }

    raise ConfigurationError("no view selected")


def extract_payload(body: dict[str, Any]) -> dict[str, Any]:
    """
    Pull the data payload out of a GraphQL response body.

    Raises:
        ProtocolError: the body carries provider errors or no data.
    """
    errors = body.get("errors")
    if errors:
        messages = [
            e.get("message") if isinstance(e, dict) else str(e)
            for e in errors
        ]
        raise ProtocolError(", ".join(m for m in messages if m) or "provider returned an error")

    data = body.get("data")
    if not data:
        raise ProtocolError(EMPTY_RESPONSE)
    return data


# ── Transport ──────────────────────────────────────────────────────────────────

class Transport(Protocol):
    async def post(self, query: str, variables: dict[str, Any], credential: str) -> dict[str, Any]:
        ...


class BitqueryTransport:
    """
    POSTs GraphQL documents with requests.

    The blocking call runs in a worker thread so the event loop stays free;
    once started it always runs to completion (or to the timeout).
    """

    def __init__(
        self,
        endpoint: str = BITQUERY_ENDPOINT,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    async def post(self, query: str, variables: dict[str, Any], credential: str) -> dict[str, Any]:
        return await asyncio.to_thread(self.post_sync, query, variables, credential)

    def post_sync(self, query: str, variables: dict[str, Any], credential: str) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {credential}",
            "X-API-KEY": credential,
        }
        try:
            resp = self._session.post(
                self.endpoint,
                json={"query": query, "variables": variables},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Network error: {e}") from e

        if not resp.ok:
            detail = (resp.text or "").strip() or resp.reason
            raise TransportError(f"HTTP {resp.status_code}: {detail}", status=resp.status_code)

        try:
            body = resp.json()
        except ValueError as e:
            raise ProtocolError("malformed response body") from e
        if not isinstance(body, dict):
            raise ProtocolError("malformed response body")
        return body

    def close(self) -> None:
        self._session.close()


# ── Orchestrator ───────────────────────────────────────────────────────────────

class RequestHandle:
    """Cancellation token for one outstanding request."""

    _counter = 0

    def __init__(self):
        RequestHandle._counter += 1
        self.id = RequestHandle._counter
        self._valid = True

    def invalidate(self) -> None:
        self._valid = False

    def is_valid(self) -> bool:
        return self._valid

    def __repr__(self) -> str:
        state = "live" if self._valid else "invalidated"
        return f"<RequestHandle #{self.id} {state}>"


class FetchOrchestrator:
    """
    Runs at most one provider request at a time and reports into the store.

    Starting a new load invalidates the previous handle, so a stale response
    can never overwrite a newer one, whichever finishes first.
    """

    def __init__(self, store: SessionStore, transport: Optional[Transport] = None):
        self._store = store
        self._transport = transport or BitqueryTransport()
        self._handle: Optional[RequestHandle] = None

    @property
    def in_flight(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        """Invalidate the live request, if any. Never touches the store."""
        if self._handle is None:
            return
        logger.info(f"Cancelling {self._handle!r}.")
        self._handle.invalidate()
        self._handle = None

    async def load(self, view: View, config: Optional[ViewConfig]) -> None:
        """
        Fetch data for a view and record the outcome in the store.

        Never raises: every failure ends in exactly one store.fail() call,
        and a superseded request ends in no store call at all.
        """
        self.cancel()
        credential = self._store.get_state().credential
        if not credential:
            logger.warning("Load requested without a credential.")
            self._store.fail(CREDENTIAL_MISSING)
            return

        handle = RequestHandle()
        self._handle = handle
        self._store.begin_load()

        try:
            query, variables = build_request(view, config)
            logger.info(f"Loading {view.value} with {variables} ({handle!r}).")
            body = await self._transport.post(query, variables, credential)
            payload = extract_payload(body)
        except FetchError as e:
            if handle.is_valid():
                logger.warning(f"{view.value} load failed: {e}")
                self._store.fail(str(e))
            else:
                logger.info(f"Discarding failure from superseded {handle!r}: {e}")
        except Exception as e:
            if handle.is_valid():
                logger.exception(f"Unexpected error while loading {view.value}.")
                self._store.fail(f"Unexpected error: {e}")
            else:
                logger.info(f"Discarding error from superseded {handle!r}: {e}")
        else:
            if handle.is_valid():
                logger.info(f"Loaded {view.value} ({handle!r}).")
                self._store.succeed(payload)
            else:
                logger.info(f"Discarding response from superseded {handle!r}.")
        finally:
            if self._handle is handle:
                self._handle = None
