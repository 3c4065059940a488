"""At most one in-flight mutation per entity.

A second submission for an entity whose previous mutation has not resolved is
refused immediately with ``ConflictInProgress`` instead of being queued, so a
rapid double submit cannot race and lose an update. Conflicting edits from
other sessions are the backend's concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from guildledger.domain.errors import ConflictInProgress

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from guildledger.domain.cache import FilterValue, ReadModelCache
    from guildledger.domain.model import EntityKind

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Invalidation:
    """A cache scope to mark stale once a mutation succeeds."""

    kind: EntityKind
    scope: dict[str, FilterValue | None] = field(default_factory=dict)

    @classmethod
    def of(cls, kind: EntityKind, **scope: FilterValue | None) -> Invalidation:
        return cls(kind, scope)


class MutationSerializer:
    def __init__(self, cache: ReadModelCache) -> None:
        self._cache = cache
        self._pending: set[str] = set()

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    def is_pending(self, entity_id: str) -> bool:
        return entity_id in self._pending

    async def submit[T](
        self,
        entity_id: str,
        mutation: Callable[[], Awaitable[T]],
        *,
        invalidates: Iterable[Invalidation] = (),
    ) -> T:
        """Run ``mutation`` unless one is already outstanding for ``entity_id``.

        The pending marker is cleared whether the mutation succeeds or fails.
        Cache scopes in ``invalidates`` are marked stale only after success, and
        only once the mutation has resolved.
        """

        if entity_id in self._pending:
            log.info("Refused mutation for %s: previous edit still in flight", entity_id)
            raise ConflictInProgress(entity_id)

        self._pending.add(entity_id)
        log.debug("Submitting mutation for %s", entity_id)
        try:
            result = await mutation()
        except Exception as exc:
            log.warning("Mutation for %s failed: %s", entity_id, exc)
            raise
        finally:
            self._pending.discard(entity_id)

        for invalidation in invalidates:
            self._cache.invalidate(invalidation.kind, **invalidation.scope)
        log.debug("Mutation for %s resolved", entity_id)
        return result


__all__ = ["Invalidation", "MutationSerializer"]
