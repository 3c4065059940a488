"""Accounts as issued for an authenticated session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from guildledger.domain.model.base import Entity
from guildledger.domain.model.enums import EntityKind, Role

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, kw_only=True)
class Account(Entity):
    """A guild member. The role never changes without re-authentication."""

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.ACCOUNT

    username: str
    role: Role
    created_at: datetime | None = None

    @property
    def is_coordinator(self) -> bool:
        return self.role is Role.COORDINATOR
