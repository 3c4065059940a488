"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    COORDINATOR = "coordinator"
    CONTRIBUTOR = "contributor"


class ResourceCategory(StrEnum):
    FORESTRY = "Forestry"
    CARPENTRY = "Carpentry"
    HUNTING = "Hunting"
    LEATHERWORKING = "Leatherworking"
    FORAGING = "Foraging"
    MINING = "Mining"
    TAILORING = "Tailoring"
    MASONRY = "Masonry"
    SMITHING = "Smithing"
    FARMING = "Farming"
    FISHING = "Fishing"
    COOKING = "Cooking"
    SCHOLAR = "Scholar"


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


class EntityKind(StrEnum):
    """Discriminator for read-model cache keys and mutation markers."""

    ACCOUNT = "account"
    SETTLEMENT = "settlement"
    SETTLEMENTS = "settlements"
    RESOURCE_ENTRY = "resource_entry"
    RESOURCE_ENTRIES = "resource_entries"
    TASK = "task"
    TASKS = "tasks"
    MY_TASKS = "my_tasks"
    PLAYER = "player"
    PLAYERS = "players"
