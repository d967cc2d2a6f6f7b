"""Tests for the add-only source registry."""

import asyncio

import pytest

from sysinfo_adapter.registry import SourceRegistry
from sysinfo_adapter.sources.system import SystemSource


def _factory(owner, provider, calls):
    async def build():
        calls.append(1)
        # yield to the loop so concurrent upserts can interleave
        await asyncio.sleep(0)
        return SystemSource(owner, provider)

    return build


def test_upsert_is_idempotent(recorder, provider):
    added = []
    registry = SourceRegistry(on_added=added.append)
    calls = []

    async def scenario():
        first = await registry.upsert("system", _factory(recorder, provider, calls))
        second = await registry.upsert("system", _factory(recorder, provider, calls))
        return first, second

    first, second = asyncio.run(scenario())
    assert first is second
    assert len(calls) == 1
    assert added == [first]
    assert len(registry) == 1
    assert "system" in registry
    assert registry.get("system") is first


def test_concurrent_upserts_build_once(recorder, provider):
    registry = SourceRegistry()
    calls = []

    async def scenario():
        return await asyncio.gather(*(
            registry.upsert("system", _factory(recorder, provider, calls)) for _ in range(5)
        ))

    results = asyncio.run(scenario())
    assert len(calls) == 1
    assert all(r is results[0] for r in results)
    assert registry.sources() == [results[0]]


def test_failing_factory_registers_nothing(recorder, provider):
    registry = SourceRegistry()

    async def broken():
        raise RuntimeError("boom")

    calls = []

    async def scenario():
        with pytest.raises(RuntimeError):
            await registry.upsert("system", broken)
        assert "system" not in registry
        return await registry.upsert("system", _factory(recorder, provider, calls))

    source = asyncio.run(scenario())
    assert list(registry) == [source]
    assert len(calls) == 1
