"""Shared fixtures for the Bitcoin Monitor test suite.

FakeTransport stands in for BitqueryTransport: every post() parks on a
future the test resolves explicitly, so completion order is under test
control.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from data.fetch import FetchOrchestrator
from data.session import DashboardSession
from data.state import SessionStore

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeTransport:
    def __init__(self):
        self.calls = []      # (query, variables, credential)
        self._pending = []   # one future per call

    async def post(self, query, variables, credential):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((query, variables, credential))
        self._pending.append(future)
        return await future

    def resolve(self, index, body):
        self._pending[index].set_result(body)

    def reject(self, index, exc):
        self._pending[index].set_exception(exc)

    async def wait_for_calls(self, n, attempts=100):
        for _ in range(attempts):
            if len(self.calls) >= n:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {n} transport calls, saw {len(self.calls)}")


class ImmediateTransport:
    """Answers every call at once with a canned body (or raises it)."""

    def __init__(self, body):
        self.body = body
        self.calls = []

    async def post(self, query, variables, credential):
        self.calls.append((query, variables, credential))
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


PRICE_PAYLOAD = {
    "bitcoin": {
        "outputs": [{"value": 250000.5, "usd": 15_750_031_500.0, "expression": 63000.0}],
    },
}

BALANCE_PAYLOAD = {
    "bitcoin": {
        "inputs": [{
            "count": 3, "value": 0.75, "value_usd": 30000.0,
            "min_date": "2023-02-01", "max_date": "2024-01-10",
        }],
        "outputs": [{
            "count": 5, "value": 1.25, "value_usd": 45000.0,
            "min_date": "2023-01-15", "max_date": "2024-02-20",
        }],
    },
}


@pytest.fixture
def store():
    return SessionStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def orchestrator(store, transport):
    return FetchOrchestrator(store, transport)


@pytest.fixture
def session(store, orchestrator):
    return DashboardSession(store, orchestrator)
