"""
data/process.py
Turns BitQuery payloads into display-ready numbers and strings.
Works on the `data` mapping the orchestrator stores as the session result.

Values are taken as already expressed in BTC; the provider converts from
satoshis before returning them, so nothing here divides by 10^8.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import pandas as pd

logger = logging.getLogger(__name__)

NA = "N/A"

BALANCE_COLUMNS = ["count", "value", "value_usd", "first_seen", "last_seen"]


# ── Formatting ─────────────────────────────────────────────────────────────────

def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Could not parse numeric value: '{value}'")
        return None
    if pd.isna(number):
        return None
    return number


def format_usd(value: Any) -> str:
    """Format a dollar amount: 1234.5 → "$1,234.50". Missing values render as N/A."""
    number = _to_float(value)
    if number is None:
        return NA
    sign = "-" if number < 0 else ""
    return f"{sign}${abs(number):,.2f}"


def format_btc(value: Any) -> str:
    """Format a BTC amount with satoshi precision: 0.5 → "0.50000000 BTC"."""
    number = _to_float(value)
    if number is None:
        return NA
    return f"{number:,.8f} BTC"


def format_timestamp(value: Any) -> str:
    """Render a datetime (or anything pandas can parse) as "YYYY-MM-DD HH:MM:SS UTC"."""
    if value is None or value == "":
        return NA
    ts = pd.Timestamp(value) if not isinstance(value, pd.Timestamp) else value
    if pd.isna(ts):
        return NA
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC")
    return ts.strftime("%Y-%m-%d %H:%M:%S UTC")


# ── Price ──────────────────────────────────────────────────────────────────────

def summarize_price(payload: Optional[dict]) -> dict[str, Optional[float]]:
    """
    Summarize the day's outputs aggregation from the price query.

    Args:
        payload: The `data` mapping: {"bitcoin": {"outputs": [{value, usd, expression}]}}.

    Returns:
        dict with btc_volume, usd_volume and price_usd (None when unavailable).
        price_usd prefers the provider's usd/value expression and falls back
        to dividing the two totals.
    """
    outputs = ((payload or {}).get("bitcoin") or {}).get("outputs") or []
    row = outputs[0] if outputs else {}

    btc_volume = _to_float(row.get("value"))
    usd_volume = _to_float(row.get("usd"))
    price_usd = _to_float(row.get("expression"))
    if price_usd is None and btc_volume and usd_volume is not None:
        price_usd = usd_volume / btc_volume

    return {"btc_volume": btc_volume, "usd_volume": usd_volume, "price_usd": price_usd}


# ── Balance ────────────────────────────────────────────────────────────────────

def _side_row(entries: Optional[list]) -> dict[str, Any]:
    entry = (entries or [{}])[0] or {}
    count = _to_float(entry.get("count"))
    return {
        "count": int(count) if count is not None else 0,
        "value": _to_float(entry.get("value")) or 0.0,
        "value_usd": _to_float(entry.get("value_usd")) or 0.0,
        "first_seen": entry.get("min_date"),
        "last_seen": entry.get("max_date"),
    }


def summarize_balance(payload: Optional[dict]) -> pd.DataFrame:
    """
    Build a two-row table of an address's activity.

    Outputs paid to the address are what it received; inputs spending from
    it are what it sent.

    Returns:
        DataFrame indexed by ["Received", "Sent"] with columns
        count, value, value_usd, first_seen, last_seen.
    """
    bitcoin = (payload or {}).get("bitcoin") or {}
    df = pd.DataFrame(
        [_side_row(bitcoin.get("outputs")), _side_row(bitcoin.get("inputs"))],
        index=["Received", "Sent"],
        columns=BALANCE_COLUMNS,
    )
    for col in ("first_seen", "last_seen"):
        df[col] = pd.to_datetime(df[col], errors="coerce", utc=True)
    return df


def balance_totals(frame: pd.DataFrame) -> dict[str, Any]:
    """Net position from a summarize_balance() table."""
    received, sent = frame.loc["Received"], frame.loc["Sent"]
    first_seen = frame["first_seen"].min()
    last_seen = frame["last_seen"].max()
    return {
        "balance_btc": float(received["value"] - sent["value"]),
        "balance_usd": float(received["value_usd"] - sent["value_usd"]),
        "tx_count": int(frame["count"].sum()),
        "first_seen": None if pd.isna(first_seen) else first_seen,
        "last_seen": None if pd.isna(last_seen) else last_seen,
    }


def format_updated(ts: Optional[datetime]) -> str:
    """Label for the header's last-updated slot."""
    if ts is None:
        return ""
    return f"Updated {format_timestamp(ts)}"
