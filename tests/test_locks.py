"""
Tests for the per-key lock registry.
"""

import asyncio

import pytest

from src.services.locks import KeyedLock


async def test_same_key_waits():
    locks = KeyedLock()
    order = []

    async def worker(name, delay):
        async with locks.hold(("u1", "2026-03")):
            order.append(f"{name}-in")
            await asyncio.sleep(delay)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a", 0.05), worker("b", 0))

    assert order == ["a-in", "a-out", "b-in", "b-out"]


async def test_different_keys_run_together():
    locks = KeyedLock()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def hold_first():
        async with locks.hold(1):
            inside.set()
            await release.wait()

    task = asyncio.create_task(hold_first())
    await inside.wait()

    async with locks.hold(2):
        assert locks.locked(1)
        assert locks.locked(2)

    release.set()
    await task


async def test_idle_keys_are_dropped():
    locks = KeyedLock()

    async with locks.hold("k"):
        assert len(locks) == 1

    assert len(locks) == 0
    assert not locks.locked("k")


async def test_released_on_error():
    locks = KeyedLock()

    with pytest.raises(RuntimeError):
        async with locks.hold("k"):
            raise RuntimeError("boom")

    assert len(locks) == 0
