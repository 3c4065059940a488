"""Failures surfaced by the guild client core.

Every failure reaches the caller that initiated the read or mutation; the
core never resolves one silently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class GuildLedgerError(Exception):
    """Base class for core failures."""


class AuthorizationDenied(GuildLedgerError):
    """A capability check failed locally, or the backend answered 403."""

    def __init__(self, message: str, *, capability: str | None = None) -> None:
        super().__init__(message)
        self.capability = capability


class SessionExpired(AuthorizationDenied):
    """No live session, or the backend answered 401. Forces re-authentication."""


class ValidationRejected(GuildLedgerError):
    """The backend refused a mutation payload; local state is unchanged."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = dict(details) if details else {}


class TaskClosed(ValidationRejected):
    """Quantity or status edit attempted on a completed or cancelled task."""


class ConflictInProgress(GuildLedgerError):
    """A mutation for the same entity has not resolved yet."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"A previous edit to {entity_id} has not resolved yet")
        self.entity_id = entity_id


class TransientNetworkFailure(GuildLedgerError):
    """The request could not complete. No automatic retry is attempted here."""


__all__ = [
    "AuthorizationDenied",
    "ConflictInProgress",
    "GuildLedgerError",
    "SessionExpired",
    "TaskClosed",
    "TransientNetworkFailure",
    "ValidationRejected",
]
