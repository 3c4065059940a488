"""Tasks assigned to contributors, plus list filters and pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from guildledger.domain.model.base import Entity, require_non_negative, require_positive
from guildledger.domain.model.enums import EntityKind, ResourceCategory, TaskStatus

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, kw_only=True)
class Task(Entity):
    """Work order for a quantity of one resource.

    ``status`` is derived from the quantities (see ``domain.lifecycle``) except for
    ``cancelled``, which is only ever set by an explicit coordinator action.
    """

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.TASK

    settlement_id: str
    resource_id: str
    assigned_to: str
    quantity_requested: int
    quantity_completed: int = 0
    status: TaskStatus = TaskStatus.PENDING
    settlement_name: str = ""
    resource_name: str = ""
    category: ResourceCategory | None = None
    deadline: datetime | None = None
    created_by: str = ""
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        require_positive("quantity_requested", self.quantity_requested)
        require_non_negative("quantity_completed", self.quantity_completed)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True, kw_only=True)
class TaskFilters:
    assigned_to: str | None = None
    settlement_id: str | None = None
    category: ResourceCategory | None = None
    status: TaskStatus | None = None
    page: int | None = None
    limit: int | None = None

    def as_params(self) -> dict[str, str | int]:
        params: dict[str, str | int] = {}
        for name in ("assigned_to", "settlement_id", "category", "status", "page", "limit"):
            value = getattr(self, name)
            if value is not None:
                params[name] = str(value) if isinstance(value, str) else value
        return params


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class TaskPage:
    tasks: tuple[Task, ...] = field(default_factory=tuple)
    pagination: Pagination | None = None
