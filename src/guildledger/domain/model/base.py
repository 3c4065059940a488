"""
Base building blocks:
identity and the entity-kind contract shared by every snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from guildledger.domain.model.enums import EntityKind


@dataclass(frozen=True, kw_only=True)
class Entity:
    """Immutable snapshot of a backend-owned record.

    The backend is the system of record; instances are replaced, never mutated.
    """

    id: str

    # class-level discriminator; subclasses must override
    ENTITY_KIND: ClassVar[EntityKind]

    @property
    def entity_kind(self) -> EntityKind:
        return self.ENTITY_KIND

    @property
    def mutation_key(self) -> str:
        """Key used to serialize mutations against this record."""
        return f"{self.ENTITY_KIND}:{self.id}"


def require_non_negative(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def require_positive(name: str, value: int) -> None:
    require_non_negative(name, value)
    if value == 0:
        raise ValueError(f"{name} must be positive, got {value}")
