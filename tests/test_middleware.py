"""Tests for the host middleware chain."""

import pytest

from core.middleware import MiddlewareChain
from helpers import FakeSession


@pytest.mark.asyncio
async def test_empty_chain_returns_none():
    assert await MiddlewareChain().dispatch(FakeSession("hi")) is None


@pytest.mark.asyncio
async def test_middlewares_run_in_order_and_can_short_circuit():
    chain = MiddlewareChain()
    seen = []

    async def first(session, next_handler):
        seen.append("first")
        return await next_handler()

    async def second(session, next_handler):
        seen.append("second")
        return "stopped"

    async def third(session, next_handler):
        seen.append("third")
        return await next_handler()

    chain.use("first", first)
    chain.use("second", second)
    chain.use("third", third)

    assert await chain.dispatch(FakeSession("hi")) == "stopped"
    assert seen == ["first", "second"]


@pytest.mark.asyncio
async def test_prepend_and_remove():
    chain = MiddlewareChain()

    async def passthrough(session, next_handler):
        return await next_handler()

    chain.use("a", passthrough)
    chain.use("b", passthrough, prepend=True)
    assert chain.names() == ["b", "a"]

    assert chain.remove("b")
    assert not chain.remove("missing")
    assert chain.names() == ["a"]
    assert len(chain) == 1
