"""Public interface for the guild REST adapter."""

from __future__ import annotations

from .client import GuildApiClient
from .schema import (
    ErrorResponse,
    LoginResponse,
    ResourceInventoryPayload,
    SettlementPayload,
    TaskPagePayload,
    TaskPayload,
    UserPayload,
)
from .translator import parse_account, parse_entry, parse_settlement, parse_task

__all__ = [
    "ErrorResponse",
    "GuildApiClient",
    "LoginResponse",
    "ResourceInventoryPayload",
    "SettlementPayload",
    "TaskPagePayload",
    "TaskPayload",
    "UserPayload",
    "parse_account",
    "parse_entry",
    "parse_settlement",
    "parse_task",
]
