"""Settlements, static resources and per-settlement inventory entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from guildledger.domain.model.base import Entity, require_non_negative, require_positive
from guildledger.domain.model.enums import EntityKind, ResourceCategory

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, kw_only=True)
class Settlement(Entity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.SETTLEMENT

    name: str
    tier: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        require_positive("tier", self.tier)


@dataclass(frozen=True, kw_only=True)
class Resource:
    """Static reference data; not mutated through this client."""

    id: str
    name: str
    category: ResourceCategory
    description: str | None = None


@dataclass(frozen=True, kw_only=True)
class ResourceInventoryEntry(Entity):
    """Demand ledger line for one resource in one settlement.

    ``assigned <= needed`` is a guideline only and ``completed`` has no ceiling;
    the only hard rule is that all three quantities are non-negative integers.
    """

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.RESOURCE_ENTRY

    settlement_id: str
    resource_id: str
    resource_name: str
    category: ResourceCategory
    needed: int = 0
    assigned: int = 0
    completed: int = 0
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        require_non_negative("needed", self.needed)
        require_non_negative("assigned", self.assigned)
        require_non_negative("completed", self.completed)

    @property
    def quantities(self) -> dict[str, int]:
        return {"needed": self.needed, "assigned": self.assigned, "completed": self.completed}
