"""Tests for data.session: the operations exposed to the dashboard."""

import asyncio

import pytest

from conftest import BALANCE_PAYLOAD, PRICE_PAYLOAD
from data.state import BalanceConfig, PriceConfig, Status, View


class TestSetCredential:
    def test_strips_token(self, session):
        session.set_credential("  abc  ")
        assert session.get_state().credential == "abc"

    def test_blank_token_clears(self, session):
        session.set_credential("abc")
        session.set_credential("   ")
        assert session.get_state().credential is None
        assert not session.get_state().has_credential

    @pytest.mark.asyncio
    async def test_abandons_in_flight_load(self, session, transport):
        session.set_credential("abc")
        task = asyncio.create_task(session.select_view(View.PRICE, PriceConfig("2024-03-01")))
        await transport.wait_for_calls(1)

        session.set_credential("new-token")
        transport.resolve(0, {"data": PRICE_PAYLOAD})
        await task

        state = session.get_state()
        assert state.credential == "new-token"
        assert state.status is Status.IDLE
        assert state.result is None


class TestSelectView:
    @pytest.mark.asyncio
    async def test_price_scenario(self, session, transport):
        session.set_credential("abc")
        task = asyncio.create_task(session.select_view(View.PRICE, PriceConfig("2024-03-01")))
        await transport.wait_for_calls(1)
        assert session.get_state().active_view is View.PRICE
        assert session.get_state().status is Status.LOADING

        transport.resolve(0, {"data": PRICE_PAYLOAD})
        await task

        state = session.get_state()
        assert state.status is Status.LOADED
        assert state.last_updated is not None
        assert state.result == PRICE_PAYLOAD
        _, variables, credential = transport.calls[0]
        assert variables["date"] == "2024-03-01T00:00:00Z"
        assert credential == "abc"

    @pytest.mark.asyncio
    async def test_balance_provider_error_scenario(self, session, transport):
        session.set_credential("abc")
        config = BalanceConfig(network="bitcoin", address="bc1qexample", limit=10, offset=0)
        task = asyncio.create_task(session.select_view(View.BALANCE, config))
        await transport.wait_for_calls(1)
        transport.resolve(0, {"errors": [{"message": "bad address"}]})
        await task

        state = session.get_state()
        assert state.status is Status.ERRORED
        assert state.error_message == "bad address"
        assert state.view_config == config

    @pytest.mark.asyncio
    async def test_without_credential(self, session, transport):
        await session.select_view(View.PRICE, PriceConfig("2024-03-01"))
        state = session.get_state()
        assert state.active_view is View.PRICE
        assert state.status is Status.ERRORED
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_switching_views_supersedes(self, session, transport):
        session.set_credential("abc")
        price = asyncio.create_task(session.select_view(View.PRICE, PriceConfig("2024-03-01")))
        await transport.wait_for_calls(1)
        balance = asyncio.create_task(session.select_view(View.BALANCE, BalanceConfig(address="bc1q")))
        await transport.wait_for_calls(2)

        transport.resolve(1, {"data": BALANCE_PAYLOAD})
        transport.resolve(0, {"data": PRICE_PAYLOAD})
        await asyncio.gather(price, balance)

        state = session.get_state()
        assert state.active_view is View.BALANCE
        assert state.result == BALANCE_PAYLOAD

    @pytest.mark.asyncio
    async def test_home_cancels(self, session, transport):
        session.set_credential("abc")
        task = asyncio.create_task(session.select_view(View.PRICE, PriceConfig("2024-03-01")))
        await transport.wait_for_calls(1)

        await session.select_view(View.NONE)
        transport.resolve(0, {"data": PRICE_PAYLOAD})
        await task

        state = session.get_state()
        assert state.is_home
        assert state.status is Status.IDLE
        assert state.result is None


class TestRefresh:
    @pytest.mark.asyncio
    async def test_reuses_current_config(self, session, transport):
        session.set_credential("abc")
        task = asyncio.create_task(session.select_view(View.PRICE, PriceConfig("2024-03-01")))
        await transport.wait_for_calls(1)
        transport.resolve(0, {"errors": [{"message": "rate limited"}]})
        await task
        assert session.get_state().status is Status.ERRORED

        task = asyncio.create_task(session.refresh())
        await transport.wait_for_calls(2)
        assert transport.calls[1][1] == transport.calls[0][1]
        transport.resolve(1, {"data": PRICE_PAYLOAD})
        await task
        assert session.get_state().status is Status.LOADED

    @pytest.mark.asyncio
    async def test_noop_on_home(self, session, transport):
        session.set_credential("abc")
        revision = session.get_state().revision
        await session.refresh()
        assert transport.calls == []
        assert session.get_state().revision == revision


class TestTeardown:
    @pytest.mark.asyncio
    async def test_suppresses_outcome(self, session, transport):
        session.set_credential("abc")
        task = asyncio.create_task(session.select_view(View.PRICE, PriceConfig("2024-03-01")))
        await transport.wait_for_calls(1)

        session.teardown()
        transport.resolve(0, {"data": PRICE_PAYLOAD})
        await task

        assert session.get_state().status is Status.LOADING
        assert session.get_state().result is None

    def test_teardown_when_idle(self, session):
        session.teardown()
        assert session.get_state().status is Status.IDLE
