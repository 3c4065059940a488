"""Translate backend payloads into domain snapshots and requests into payloads."""

from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING

from guildledger.domain.model import (
    Account,
    Pagination,
    ResourceInventoryEntry,
    Role,
    Settlement,
    Task,
    TaskPage,
    TaskStatus,
)
from guildledger.domain.requests import TaskReport

if TYPE_CHECKING:
    from datetime import datetime

    from guildledger.domain.requests import (
        EntryUpdate,
        NewPlayer,
        NewSettlement,
        NewTask,
        SettlementChanges,
        TaskChanges,
    )

    from .schema import (
        ResourceInventoryPayload,
        SettlementPayload,
        TaskPagePayload,
        TaskPayload,
        UserPayload,
        WireRole,
    )

_ROLE_FROM_WIRE: dict[str, Role] = {"leader": Role.COORDINATOR, "member": Role.CONTRIBUTOR}
_ROLE_TO_WIRE: dict[Role, WireRole] = {Role.COORDINATOR: "leader", Role.CONTRIBUTOR: "member"}

_ENTRY_FIELDS = {
    "needed": "quantity_needed",
    "assigned": "quantity_assigned",
    "completed": "quantity_completed",
}


def _aware(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _iso(value: datetime | None) -> str | None:
    aware = _aware(value)
    return aware.isoformat() if aware is not None else None


def parse_account(payload: UserPayload) -> Account:
    return Account(
        id=payload.id,
        username=payload.username,
        role=_ROLE_FROM_WIRE[payload.role],
        created_at=_aware(payload.created_at),
    )


def parse_settlement(payload: SettlementPayload) -> Settlement:
    return Settlement(
        id=payload.id,
        name=payload.name,
        tier=payload.tier,
        created_at=_aware(payload.created_at),
        updated_at=_aware(payload.updated_at),
    )


def parse_entry(payload: ResourceInventoryPayload) -> ResourceInventoryEntry:
    return ResourceInventoryEntry(
        id=payload.id,
        settlement_id=payload.settlement_id,
        resource_id=payload.resource_id,
        resource_name=payload.resource_name,
        category=payload.category,
        needed=payload.quantity_needed,
        assigned=payload.quantity_assigned,
        completed=payload.quantity_completed,
        updated_at=_aware(payload.updated_at),
    )


def parse_task(payload: TaskPayload) -> Task:
    return Task(
        id=payload.id,
        settlement_id=payload.settlement_id,
        settlement_name=payload.settlement_name,
        resource_id=payload.resource_id,
        resource_name=payload.resource_name,
        category=payload.category,
        assigned_to=payload.assigned_to,
        quantity_requested=payload.quantity_requested,
        quantity_completed=payload.quantity_completed,
        status=TaskStatus(payload.status),
        deadline=_aware(payload.deadline),
        created_by=payload.created_by,
        notes=payload.notes,
        created_at=_aware(payload.created_at),
        updated_at=_aware(payload.updated_at),
    )


def parse_task_page(payload: TaskPagePayload) -> TaskPage:
    pagination = (
        Pagination(
            page=payload.pagination.page,
            limit=payload.pagination.limit,
            total=payload.pagination.total,
            total_pages=payload.pagination.total_pages,
        )
        if payload.pagination is not None
        else None
    )
    return TaskPage(tasks=tuple(parse_task(item) for item in payload.data), pagination=pagination)


def entry_update_body(update: EntryUpdate) -> dict[str, int]:
    return {_ENTRY_FIELDS[name]: value for name, value in update.changes().items()}


def task_update_body(changes: TaskChanges | TaskReport) -> dict[str, object]:
    if isinstance(changes, TaskReport):
        return {
            "quantity_completed": changes.quantity_completed,
            "status": str(changes.status),
        }
    body = dict(changes.changes())
    if changes.deadline is not None:
        body["deadline"] = _iso(changes.deadline)
    return body


def new_task_body(request: NewTask) -> dict[str, object]:
    body: dict[str, object] = {
        "settlement_id": request.settlement_id,
        "resource_id": request.resource_id,
        "assigned_to": request.assigned_to,
        "quantity_requested": request.quantity_requested,
    }
    if request.deadline is not None:
        body["deadline"] = _iso(request.deadline)
    if request.notes is not None:
        body["notes"] = request.notes
    return body


def new_settlement_body(request: NewSettlement) -> dict[str, object]:
    return {"name": request.name.strip(), "tier": request.tier}


def settlement_update_body(changes: SettlementChanges) -> dict[str, object]:
    return changes.changes()


def new_player_body(request: NewPlayer) -> dict[str, object]:
    return {
        "username": request.username,
        "password": request.password,
        "role": _ROLE_TO_WIRE[request.role],
    }
