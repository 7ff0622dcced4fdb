"""Tests for data.process: payload summaries and display formatting."""

from datetime import datetime, timezone

import pandas as pd
import pytest

from conftest import BALANCE_PAYLOAD, PRICE_PAYLOAD
from data.process import (
    balance_totals,
    format_btc,
    format_timestamp,
    format_updated,
    format_usd,
    summarize_balance,
    summarize_price,
)


class TestFormatting:
    @pytest.mark.parametrize("value,expected", [
        (1234.5, "$1,234.50"),
        ("63000", "$63,000.00"),
        (-12.5, "-$12.50"),
        (None, "N/A"),
        ("abc", "N/A"),
    ])
    def test_format_usd(self, value, expected):
        assert format_usd(value) == expected

    def test_format_btc(self):
        assert format_btc(0.5) == "0.50000000 BTC"
        assert format_btc(None) == "N/A"

    def test_format_timestamp(self):
        ts = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-03-01 12:00:00 UTC"
        assert format_timestamp(None) == "N/A"
        assert format_timestamp(pd.NaT) == "N/A"

    def test_format_updated(self):
        assert format_updated(None) == ""
        ts = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert format_updated(ts) == "Updated 2024-03-01 12:00:00 UTC"


class TestSummarizePrice:
    def test_uses_provider_expression(self):
        summary = summarize_price(PRICE_PAYLOAD)
        assert summary["btc_volume"] == 250000.5
        assert summary["price_usd"] == 63000.0

    def test_falls_back_to_ratio(self):
        payload = {"bitcoin": {"outputs": [{"value": 2.0, "usd": 100000.0}]}}
        assert summarize_price(payload)["price_usd"] == 50000.0

    @pytest.mark.parametrize("payload", [None, {}, {"bitcoin": {"outputs": []}}])
    def test_missing_outputs(self, payload):
        summary = summarize_price(payload)
        assert summary == {"btc_volume": None, "usd_volume": None, "price_usd": None}


class TestSummarizeBalance:
    def test_received_and_sent(self):
        frame = summarize_balance(BALANCE_PAYLOAD)
        assert list(frame.index) == ["Received", "Sent"]
        assert frame.loc["Received", "value"] == 1.25
        assert frame.loc["Sent", "count"] == 3

    def test_values_not_rescaled(self):
        frame = summarize_balance(BALANCE_PAYLOAD)
        assert frame.loc["Received", "value"] == BALANCE_PAYLOAD["bitcoin"]["outputs"][0]["value"]

    def test_totals(self):
        totals = balance_totals(summarize_balance(BALANCE_PAYLOAD))
        assert totals["balance_btc"] == pytest.approx(0.5)
        assert totals["balance_usd"] == pytest.approx(15000.0)
        assert totals["tx_count"] == 8
        assert totals["first_seen"] == pd.Timestamp("2023-01-15", tz="UTC")
        assert totals["last_seen"] == pd.Timestamp("2024-02-20", tz="UTC")

    def test_empty_activity(self):
        payload = {"bitcoin": {"inputs": [], "outputs": []}}
        totals = balance_totals(summarize_balance(payload))
        assert totals["balance_btc"] == 0.0
        assert totals["tx_count"] == 0
        assert totals["first_seen"] is None
        assert totals["last_seen"] is None
