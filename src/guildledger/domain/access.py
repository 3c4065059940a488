"""Role to capability resolution and route gating.

A single function maps each role onto a closed set of capabilities; every
component asks the gate instead of branching on the role itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from guildledger.domain.errors import AuthorizationDenied, SessionExpired
from guildledger.domain.model import Role

if TYPE_CHECKING:
    from guildledger.domain.session import Session

log = getLogger(__name__)


class Capability(StrEnum):
    VIEW_SETTLEMENTS = "view_settlements"
    MANAGE_SETTLEMENTS = "manage_settlements"
    VIEW_RESOURCES = "view_resources"
    EDIT_RESOURCES = "edit_resources"
    VIEW_OWN_TASKS = "view_own_tasks"
    VIEW_ALL_TASKS = "view_all_tasks"
    REPORT_PROGRESS = "report_progress"
    MANAGE_TASKS = "manage_tasks"
    CANCEL_TASKS = "cancel_tasks"
    VIEW_PLAYERS = "view_players"
    MANAGE_PLAYERS = "manage_players"


class View(StrEnum):
    LOGIN = "/login"
    DASHBOARD = "/dashboard"
    ASSIGNMENTS = "/my-tasks"


_CONTRIBUTOR_CAPABILITIES = frozenset(
    {
        Capability.VIEW_SETTLEMENTS,
        Capability.VIEW_RESOURCES,
        Capability.VIEW_OWN_TASKS,
        Capability.REPORT_PROGRESS,
    }
)

_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.COORDINATOR: frozenset(Capability),
    Role.CONTRIBUTOR: _CONTRIBUTOR_CAPABILITIES,
}

_DEFAULT_VIEWS: dict[Role, View] = {
    Role.COORDINATOR: View.DASHBOARD,
    Role.CONTRIBUTOR: View.ASSIGNMENTS,
}


def capabilities_for(role: Role) -> frozenset[Capability]:
    return _CAPABILITIES[role]


def default_view_for(role: Role) -> View:
    return _DEFAULT_VIEWS[role]


@dataclass(frozen=True, slots=True)
class AccessDecision:
    allowed: bool
    redirect_to: str | None = None
    return_to: str | None = None

    @classmethod
    def allow(cls) -> AccessDecision:
        return cls(allowed=True)


class AccessGate:
    """Answers capability questions for the session it was given."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._return_to: str | None = None

    @property
    def return_to(self) -> str | None:
        return self._return_to

    def capabilities(self) -> frozenset[Capability]:
        role = self._session.role
        if role is None or not self._session.is_active:
            return frozenset()
        return capabilities_for(role)

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities()

    def check(self, *, required_role: Role | None = None, destination: str) -> AccessDecision:
        """Decide whether ``destination`` may be shown to the current session.

        Denials carry a redirect instead of an error: an anonymous session goes to
        the login view with ``destination`` remembered, and a session with the
        wrong role goes to its own default view.
        """

        role = self._session.role
        if role is None or not self._session.is_active:
            self._return_to = destination
            return AccessDecision(allowed=False, redirect_to=View.LOGIN, return_to=destination)
        if required_role is not None and role is not required_role:
            return AccessDecision(allowed=False, redirect_to=default_view_for(role))
        return AccessDecision.allow()

    def resume(self, *, required_role: Role | None = None) -> AccessDecision:
        """Replay the destination remembered before login, consuming it."""

        role = self._session.role
        if role is None or not self._session.is_active:
            return AccessDecision(allowed=False, redirect_to=View.LOGIN, return_to=self._return_to)
        destination = self._return_to
        self._return_to = None
        if destination is None:
            return AccessDecision(allowed=True, redirect_to=default_view_for(role))
        decision = self.check(required_role=required_role, destination=destination)
        if decision.allowed:
            return AccessDecision(allowed=True, redirect_to=destination)
        return decision

    def require(self, capability: Capability) -> None:
        if not self._session.is_active:
            raise SessionExpired("Not authenticated", capability=capability)
        if capability not in self.capabilities():
            log.debug("Denied %s for role %s", capability, self._session.role)
            raise AuthorizationDenied(
                f"{self._session.role} sessions may not {capability.replace('_', ' ')}",
                capability=capability,
            )


__all__ = [
    "AccessDecision",
    "AccessGate",
    "Capability",
    "View",
    "capabilities_for",
    "default_view_for",
]
