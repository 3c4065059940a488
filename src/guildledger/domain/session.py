"""Explicit session lifecycle: opened at login, closed at logout or on 401."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from guildledger.domain.errors import SessionExpired

if TYPE_CHECKING:
    from collections.abc import Callable

    from guildledger.domain.model import Account, Role

log = getLogger(__name__)


class Session:
    """Holds the opaque bearer credential and the account it was issued for.

    One instance is created per client and handed by reference to every core
    component. Listeners registered with ``on_close`` run whenever the session
    ends so dependent state (the read-model cache) is discarded with it.
    """

    def __init__(self) -> None:
        self._token: str | None = None
        self._account: Account | None = None
        self._listeners: list[Callable[[str], None]] = []

    @property
    def is_active(self) -> bool:
        return self._token is not None and self._account is not None

    @property
    def account(self) -> Account | None:
        return self._account

    @property
    def role(self) -> Role | None:
        return self._account.role if self._account is not None else None

    @property
    def token(self) -> str | None:
        return self._token

    def require_account(self) -> Account:
        if self._account is None or self._token is None:
            raise SessionExpired("Not authenticated")
        return self._account

    def require_token(self) -> str:
        if self._token is None or self._account is None:
            raise SessionExpired("Not authenticated")
        return self._token

    def open(self, token: str, account: Account) -> None:
        if not token:
            raise ValueError("token must not be empty")
        if self.is_active:
            self.close(reason="replaced")
        self._token = token
        self._account = account
        log.info("Session opened for %s (%s)", account.username, account.role)

    def close(self, *, reason: str = "logout") -> None:
        was_active = self.is_active
        self._token = None
        self._account = None
        if was_active:
            log.info("Session closed: %s", reason)
        for listener in list(self._listeners):
            listener(reason)

    def on_close(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)
