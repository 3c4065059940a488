"""Public domain model surface."""

from __future__ import annotations

from guildledger.domain.model.account import Account
from guildledger.domain.model.base import Entity
from guildledger.domain.model.enums import (
    TERMINAL_STATUSES,
    EntityKind,
    ResourceCategory,
    Role,
    TaskStatus,
)
from guildledger.domain.model.settlement import Resource, ResourceInventoryEntry, Settlement
from guildledger.domain.model.task import Pagination, Task, TaskFilters, TaskPage

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    # records
    "Account",
    "Settlement",
    "Resource",
    "ResourceInventoryEntry",
    "Task",
    # queries
    "TaskFilters",
    "TaskPage",
    "Pagination",
    # enums
    "EntityKind",
    "ResourceCategory",
    "Role",
    "TaskStatus",
    "TERMINAL_STATUSES",
]
