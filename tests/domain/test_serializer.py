from __future__ import annotations

import asyncio

import pytest

from guildledger.domain.cache import CacheKey, ReadModelCache
from guildledger.domain.errors import ConflictInProgress, ValidationRejected
from guildledger.domain.model import EntityKind
from guildledger.domain.serializer import Invalidation, MutationSerializer


async def _seed(cache: ReadModelCache, key: CacheKey) -> None:
    async def fetch() -> str:
        return "snapshot"

    await cache.get(key, fetch)


def test_second_submit_for_same_entity_is_refused_immediately() -> None:
    async def scenario() -> None:
        serializer = MutationSerializer(ReadModelCache())
        gate = asyncio.Event()
        attempts: list[str] = []

        async def first() -> str:
            attempts.append("first")
            await gate.wait()
            return "first-result"

        async def second() -> str:
            attempts.append("second")
            return "second-result"

        running = asyncio.create_task(serializer.submit("resource_entry:e1", first))
        await asyncio.sleep(0)
        assert serializer.is_pending("resource_entry:e1")

        with pytest.raises(ConflictInProgress) as excinfo:
            await serializer.submit("resource_entry:e1", second)

        gate.set()
        assert await running == "first-result"
        assert attempts == ["first"]
        assert excinfo.value.entity_id == "resource_entry:e1"
        assert serializer.pending == frozenset()

    asyncio.run(scenario())


def test_independent_entities_overlap() -> None:
    async def scenario() -> None:
        serializer = MutationSerializer(ReadModelCache())
        gate = asyncio.Event()

        async def slow() -> str:
            await gate.wait()
            return "slow"

        async def quick() -> str:
            return "quick"

        running = asyncio.create_task(serializer.submit("task:1", slow))
        await asyncio.sleep(0)

        assert await serializer.submit("task:2", quick) == "quick"
        gate.set()
        assert await running == "slow"

    asyncio.run(scenario())


def test_failure_clears_marker_and_skips_invalidation() -> None:
    async def scenario() -> None:
        cache = ReadModelCache()
        key = CacheKey.of(EntityKind.TASK, id="1")
        await _seed(cache, key)
        serializer = MutationSerializer(cache)

        async def rejected() -> str:
            raise ValidationRejected("quantity_requested must be positive", status_code=400)

        with pytest.raises(ValidationRejected):
            await serializer.submit(
                "task:1", rejected, invalidates=(Invalidation.of(EntityKind.TASK, id="1"),)
            )

        assert not serializer.is_pending("task:1")
        assert not cache.is_stale(key)

    asyncio.run(scenario())


def test_invalidation_happens_only_after_mutation_resolves() -> None:
    async def scenario() -> None:
        cache = ReadModelCache()
        key = CacheKey.of(EntityKind.TASKS, settlement_id="A")
        other = CacheKey.of(EntityKind.TASKS, settlement_id="B")
        await _seed(cache, key)
        await _seed(cache, other)
        serializer = MutationSerializer(cache)
        gate = asyncio.Event()

        async def mutation() -> str:
            await gate.wait()
            return "done"

        running = asyncio.create_task(
            serializer.submit(
                "task:1",
                mutation,
                invalidates=(Invalidation.of(EntityKind.TASKS, settlement_id="A"),),
            )
        )
        await asyncio.sleep(0)
        assert not cache.is_stale(key)

        gate.set()
        await running

        assert cache.is_stale(key)
        assert not cache.is_stale(other)

    asyncio.run(scenario())
