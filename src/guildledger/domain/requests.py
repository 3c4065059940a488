"""Mutation payloads sent across the backend boundary.

Update payloads are partial: a field left as ``None`` is omitted from the
request and keeps its server value.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from guildledger.domain.model.base import require_non_negative, require_positive
from guildledger.domain.model.enums import Role

if TYPE_CHECKING:
    from datetime import datetime

    from guildledger.domain.model import TaskStatus


def _present(payload: object) -> dict[str, object]:
    return {
        item.name: getattr(payload, item.name)
        for item in fields(payload)  # type: ignore[arg-type]
        if getattr(payload, item.name) is not None
    }


@dataclass(frozen=True, slots=True)
class EntryUpdate:
    needed: int | None = None
    assigned: int | None = None
    completed: int | None = None

    def __post_init__(self) -> None:
        for name, value in _present(self).items():
            require_non_negative(name, value)  # type: ignore[arg-type]

    @property
    def is_empty(self) -> bool:
        return not _present(self)

    def changes(self) -> dict[str, int]:
        return _present(self)  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class TaskReport:
    quantity_completed: int
    status: TaskStatus


@dataclass(frozen=True, slots=True)
class NewTask:
    settlement_id: str
    resource_id: str
    assigned_to: str
    quantity_requested: int
    deadline: datetime | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        require_positive("quantity_requested", self.quantity_requested)


@dataclass(frozen=True, slots=True)
class TaskChanges:
    """Coordinator edits to a task. Status is never set through this payload."""

    assigned_to: str | None = None
    quantity_requested: int | None = None
    deadline: datetime | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.quantity_requested is not None:
            require_positive("quantity_requested", self.quantity_requested)

    @property
    def is_empty(self) -> bool:
        return not _present(self)

    def changes(self) -> dict[str, object]:
        return _present(self)


@dataclass(frozen=True, slots=True)
class NewSettlement:
    name: str
    tier: int

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must not be blank")
        require_positive("tier", self.tier)


@dataclass(frozen=True, slots=True)
class SettlementChanges:
    name: str | None = None
    tier: int | None = None

    def __post_init__(self) -> None:
        if self.tier is not None:
            require_positive("tier", self.tier)

    def changes(self) -> dict[str, object]:
        return _present(self)


@dataclass(frozen=True, slots=True)
class NewPlayer:
    username: str
    password: str
    role: Role = Role.CONTRIBUTOR

    def __repr__(self) -> str:
        return f"NewPlayer(username={self.username!r}, role={self.role!r})"


__all__ = [
    "EntryUpdate",
    "NewPlayer",
    "NewSettlement",
    "NewTask",
    "SettlementChanges",
    "TaskChanges",
    "TaskReport",
]
