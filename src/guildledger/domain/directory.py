"""Settlements and guild players."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from guildledger.domain.access import Capability
from guildledger.domain.cache import CacheKey
from guildledger.domain.model import EntityKind
from guildledger.domain.serializer import Invalidation

if TYPE_CHECKING:
    from guildledger.domain.access import AccessGate
    from guildledger.domain.cache import ReadModelCache
    from guildledger.domain.model import Account, Settlement
    from guildledger.domain.ports import GuildBackend
    from guildledger.domain.requests import NewPlayer, NewSettlement, SettlementChanges
    from guildledger.domain.serializer import MutationSerializer

log = getLogger(__name__)

SETTLEMENTS_KEY = CacheKey.of(EntityKind.SETTLEMENTS)
PLAYERS_KEY = CacheKey.of(EntityKind.PLAYERS)


def _settlement_invalidations(settlement_id: str) -> tuple[Invalidation, ...]:
    return (
        Invalidation.of(EntityKind.SETTLEMENT, id=settlement_id),
        Invalidation.of(EntityKind.SETTLEMENTS),
    )


class Directory:
    def __init__(
        self,
        *,
        backend: GuildBackend,
        gate: AccessGate,
        cache: ReadModelCache,
        serializer: MutationSerializer,
    ) -> None:
        self._backend = backend
        self._gate = gate
        self._cache = cache
        self._serializer = serializer

    async def list_settlements(self) -> tuple[Settlement, ...]:
        self._gate.require(Capability.VIEW_SETTLEMENTS)

        async def fetch() -> tuple[Settlement, ...]:
            return tuple(await self._backend.list_settlements())

        return await self._cache.get(SETTLEMENTS_KEY, fetch)

    async def get_settlement(self, settlement_id: str) -> Settlement:
        self._gate.require(Capability.VIEW_SETTLEMENTS)
        return await self._cache.get(
            CacheKey.of(EntityKind.SETTLEMENT, id=settlement_id),
            lambda: self._backend.get_settlement(settlement_id),
        )

    async def create_settlement(self, request: NewSettlement) -> Settlement:
        self._gate.require(Capability.MANAGE_SETTLEMENTS)
        created = await self._serializer.submit(
            f"{EntityKind.SETTLEMENTS}:new:{request.name}",
            lambda: self._backend.create_settlement(request),
            invalidates=(Invalidation.of(EntityKind.SETTLEMENTS),),
        )
        log.info("Created settlement %s (T%s)", created.name, created.tier)
        return created

    async def update_settlement(
        self, settlement_id: str, changes: SettlementChanges
    ) -> Settlement:
        self._gate.require(Capability.MANAGE_SETTLEMENTS)
        return await self._serializer.submit(
            f"{EntityKind.SETTLEMENT}:{settlement_id}",
            lambda: self._backend.update_settlement(settlement_id, changes),
            invalidates=(
                *_settlement_invalidations(settlement_id),
                # Tasks carry the settlement name.
                Invalidation.of(EntityKind.TASKS, settlement_id=settlement_id),
                Invalidation.of(EntityKind.MY_TASKS),
            ),
        )

    async def delete_settlement(self, settlement_id: str) -> None:
        self._gate.require(Capability.MANAGE_SETTLEMENTS)

        async def mutation() -> None:
            await self._backend.delete_settlement(settlement_id)

        await self._serializer.submit(
            f"{EntityKind.SETTLEMENT}:{settlement_id}",
            mutation,
            invalidates=(
                *_settlement_invalidations(settlement_id),
                Invalidation.of(EntityKind.RESOURCE_ENTRIES, settlement_id=settlement_id),
                Invalidation.of(EntityKind.TASKS, settlement_id=settlement_id),
                Invalidation.of(EntityKind.MY_TASKS),
            ),
        )
        log.info("Deleted settlement %s", settlement_id)

    async def list_players(self) -> tuple[Account, ...]:
        self._gate.require(Capability.VIEW_PLAYERS)

        async def fetch() -> tuple[Account, ...]:
            return tuple(await self._backend.list_players())

        return await self._cache.get(PLAYERS_KEY, fetch)

    async def get_player(self, player_id: str) -> Account:
        self._gate.require(Capability.VIEW_PLAYERS)
        return await self._cache.get(
            CacheKey.of(EntityKind.PLAYER, id=player_id),
            lambda: self._backend.get_player(player_id),
        )

    async def create_player(self, request: NewPlayer) -> Account:
        self._gate.require(Capability.MANAGE_PLAYERS)
        created = await self._serializer.submit(
            f"{EntityKind.PLAYERS}:new:{request.username}",
            lambda: self._backend.create_player(request),
            invalidates=(Invalidation.of(EntityKind.PLAYERS),),
        )
        log.info("Created %s account %s", created.role, created.username)
        return created


__all__ = ["Directory"]
