"""Pydantic models describing the guild backend payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guildledger.domain.model import ResourceCategory

WireRole = Literal["leader", "member"]
WireStatus = Literal["pending", "in_progress", "completed", "cancelled"]


def _id_to_str(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _category_name(value: object) -> object:
    value = _blank_to_none(value)
    if isinstance(value, str) and value not in ResourceCategory:
        # Tolerate lowercase category names.
        return value.capitalize()
    return value


class GuildBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UserPayload(GuildBaseModel):
    id: str
    username: str
    role: WireRole
    created_at: datetime | None = None

    _normalize_id = field_validator("id", mode="before")(_id_to_str)


class LoginResponse(GuildBaseModel):
    token: str = Field(min_length=1)
    user: UserPayload


class SettlementPayload(GuildBaseModel):
    id: str
    name: str
    tier: int = Field(ge=1)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    _normalize_id = field_validator("id", mode="before")(_id_to_str)


class ResourceInventoryPayload(GuildBaseModel):
    id: str
    settlement_id: str
    resource_id: str
    resource_name: str = ""
    category: ResourceCategory
    quantity_needed: int = Field(default=0, ge=0)
    quantity_assigned: int = Field(default=0, ge=0)
    quantity_completed: int = Field(default=0, ge=0)
    updated_at: datetime | None = None

    _normalize_ids = field_validator("id", "settlement_id", "resource_id", mode="before")(
        _id_to_str
    )
    _normalize_category = field_validator("category", mode="before")(_category_name)


class TaskPayload(GuildBaseModel):
    id: str
    settlement_id: str
    settlement_name: str = ""
    resource_id: str
    resource_name: str = ""
    category: ResourceCategory | None = None
    assigned_to: str
    quantity_requested: int = Field(ge=1)
    quantity_completed: int = Field(default=0, ge=0)
    status: WireStatus = "pending"
    deadline: datetime | None = None
    created_by: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    notes: str | None = None

    _normalize_ids = field_validator(
        "id", "settlement_id", "resource_id", "assigned_to", "created_by", mode="before"
    )(_id_to_str)
    _normalize_optional = field_validator("deadline", "notes", mode="before")(_blank_to_none)
    _normalize_category = field_validator("category", mode="before")(_category_name)


class PaginationPayload(GuildBaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TaskPagePayload(GuildBaseModel):
    data: list[TaskPayload]
    pagination: PaginationPayload | None = None


class ErrorResponse(GuildBaseModel):
    error: str
    code: str | None = None
    details: dict[str, object] | None = None
