"""Read-model cache keyed by (entity kind, filter parameters).

Entries never expire on a timer. They become stale only through explicit
invalidation after a successful mutation, or disappear when the session ends.

Concurrent reads of one key share a single in-flight fetch. Each fetch is
stamped with the slot's generation at issue time; invalidation and clearing
advance the generation, so a slow response that was issued before a newer
fetch (or before a mutation landed) is handed back to its own callers but is
never written into the slot. ``read`` reports which case applies, so callers
that keep their own per-entity state only fold in current results.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from guildledger.domain.model import EntityKind

log = getLogger(__name__)

type FilterValue = str | int
type Fetch[T] = Callable[[], Awaitable[T]]


class CacheKey(NamedTuple):
    kind: EntityKind
    filters: tuple[tuple[str, FilterValue], ...] = ()

    @classmethod
    def of(cls, kind: EntityKind, **filters: FilterValue | None) -> CacheKey:
        """Build a key, dropping unset filters and normalising their order."""
        items = tuple(sorted((name, value) for name, value in filters.items() if value is not None))
        return cls(kind, items)

    @property
    def filter_map(self) -> dict[str, FilterValue]:
        return dict(self.filters)

    def covers(self, kind: EntityKind, scope: dict[str, FilterValue]) -> bool:
        """Whether an entity in ``scope`` could appear under this key.

        A key that does not filter on a scope field covers every value of it.
        """
        if self.kind != kind:
            return False
        own = self.filter_map
        return all(own.get(name, value) == value for name, value in scope.items())


@dataclass(frozen=True, slots=True)
class CacheRead[T]:
    value: T
    current: bool
    generation: int


@dataclass(slots=True)
class _Slot:
    value: Any = None
    has_value: bool = False
    stale: bool = False
    generation: int = 0
    inflight: asyncio.Task[Any] | None = field(default=None, repr=False)


class ReadModelCache:
    """Snapshot store shared by the ledger, task board and directory."""

    def __init__(self) -> None:
        self._slots: dict[CacheKey, _Slot] = {}
        # Survives ``clear`` so generations never repeat for a recreated slot.
        self._epoch = 0

    def __contains__(self, key: object) -> bool:
        slot = self._slots.get(key) if isinstance(key, CacheKey) else None
        return slot is not None and slot.has_value

    def keys(self) -> tuple[CacheKey, ...]:
        return tuple(key for key, slot in self._slots.items() if slot.has_value)

    def peek(self, key: CacheKey) -> Any | None:
        """Return the last stored snapshot, stale or not, without fetching."""
        slot = self._slots.get(key)
        return slot.value if slot is not None and slot.has_value else None

    def is_stale(self, key: CacheKey) -> bool:
        slot = self._slots.get(key)
        return slot is None or not slot.has_value or slot.stale

    async def get[T](self, key: CacheKey, fetch: Fetch[T]) -> T:
        return (await self.read(key, fetch)).value

    async def read[T](self, key: CacheKey, fetch: Fetch[T]) -> CacheRead[T]:
        """Like ``get``, but also say whether the value is still current.

        A result is current when no invalidation or clear touched ``key``
        between issuing the fetch and handing the value back. The check is
        repeated after the await, so a mutation that resolved while this
        reader was waiting to resume still marks the result superseded.
        """

        slot = self._slots.get(key)
        if slot is None:
            self._epoch += 1
            slot = self._slots[key] = _Slot(generation=self._epoch)

        if slot.has_value and not slot.stale:
            return CacheRead(slot.value, current=True, generation=slot.generation)

        if slot.inflight is None:
            slot.inflight = asyncio.ensure_future(self._run_fetch(key, slot, slot.generation, fetch))
            log.debug("Fetching %s (generation %s)", key, slot.generation)
        else:
            log.debug("Joining in-flight fetch for %s", key)

        # Shielded so one cancelled reader does not cancel the fetch for the others.
        result: CacheRead[T] = await asyncio.shield(slot.inflight)
        if result.current and not self._is_current(key, slot, result.generation):
            return CacheRead(result.value, current=False, generation=result.generation)
        return result

    def _is_current(self, key: CacheKey, slot: _Slot, generation: int) -> bool:
        return self._slots.get(key) is slot and slot.generation == generation

    async def _run_fetch[T](
        self, key: CacheKey, slot: _Slot, generation: int, fetch: Fetch[T]
    ) -> CacheRead[T]:
        try:
            value = await fetch()
        finally:
            if slot.inflight is asyncio.current_task():
                slot.inflight = None

        if self._is_current(key, slot, generation):
            slot.value = value
            slot.has_value = True
            slot.stale = False
            return CacheRead(value, current=True, generation=generation)
        log.debug("Discarding superseded response for %s", key)
        return CacheRead(value, current=False, generation=generation)

    def invalidate(self, kind: EntityKind, **scope: FilterValue | None) -> tuple[CacheKey, ...]:
        """Mark every key of ``kind`` that may hold entities in ``scope`` as stale."""

        effective = {name: value for name, value in scope.items() if value is not None}
        affected: list[CacheKey] = []
        for key, slot in self._slots.items():
            if not key.covers(kind, effective):
                continue
            self._epoch += 1
            slot.generation = self._epoch
            slot.stale = True
            # Later readers start a fresh fetch rather than joining one issued
            # before the mutation resolved.
            slot.inflight = None
            affected.append(key)
        if affected:
            log.debug("Invalidated %d key(s) of %s for %s", len(affected), kind, effective)
        return tuple(affected)

    def invalidate_key(self, key: CacheKey) -> bool:
        slot = self._slots.get(key)
        if slot is None:
            return False
        self._epoch += 1
        slot.generation = self._epoch
        slot.stale = True
        slot.inflight = None
        return True

    def clear(self) -> None:
        """Drop every snapshot; outstanding fetches resolve without writing back."""
        count = len(self._slots)
        self._slots.clear()
        self._epoch += 1
        if count:
            log.info("Cleared %d cached read model(s)", count)


__all__ = ["CacheKey", "CacheRead", "ReadModelCache"]
