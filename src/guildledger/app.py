"""Application composition: one ``GuildClient`` per signed-in user."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from guildledger.adapters.guild_api import GuildApiClient
from guildledger.config import get_api_config
from guildledger.domain.access import AccessGate
from guildledger.domain.cache import ReadModelCache
from guildledger.domain.directory import Directory
from guildledger.domain.ledger import ResourceLedger
from guildledger.domain.lifecycle import TaskSummary, summarize
from guildledger.domain.serializer import MutationSerializer
from guildledger.domain.session import Session
from guildledger.domain.tasks import TaskBoard

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from guildledger.adapters.http_resilience import ResilientClient
    from guildledger.config import GuildApiConfig, ResilienceConfig
    from guildledger.domain.access import AccessDecision
    from guildledger.domain.model import Account
    from guildledger.domain.ports import GuildBackend

log = getLogger(__name__)


class GuildClient:
    """Wires the session, gate, cache and serializer into the domain services.

    Every service shares the same session and cache. Ending the session, by
    logout or by a 401 from the backend, clears the cache and drops any local
    edit state.
    """

    def __init__(self, backend: GuildBackend, *, session: Session | None = None) -> None:
        self.backend = backend
        self.session = session or Session()
        self.cache = ReadModelCache()
        self.gate = AccessGate(self.session)
        self.serializer = MutationSerializer(self.cache)
        self.ledger = ResourceLedger(
            backend=backend, gate=self.gate, cache=self.cache, serializer=self.serializer
        )
        self.tasks = TaskBoard(
            backend=backend,
            session=self.session,
            gate=self.gate,
            cache=self.cache,
            serializer=self.serializer,
        )
        self.directory = Directory(
            backend=backend, gate=self.gate, cache=self.cache, serializer=self.serializer
        )
        self.session.on_close(self._on_session_closed)

    async def __aenter__(self) -> GuildClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.backend.aclose()

    def _on_session_closed(self, reason: str) -> None:
        self.cache.clear()
        self.ledger.reset()
        self.tasks.reset()
        log.debug("Dropped local state after session close (%s)", reason)

    @property
    def account(self) -> Account | None:
        return self.session.account

    async def login(self, username: str, password: str) -> AccessDecision:
        """Authenticate and return where the user should land next."""

        result = await self.backend.login(username, password)
        self.session.open(result.token, result.account)
        return self.gate.resume()

    async def logout(self) -> None:
        """End the session locally even when the backend call fails."""

        if not self.session.is_active:
            return
        try:
            await self.backend.logout()
        finally:
            self.session.close(reason="logout")

    async def me(self) -> Account:
        self.session.require_account()
        return await self.backend.current_account()

    async def assignment_summary(self) -> TaskSummary:
        return summarize(await self.tasks.my_tasks())


def build_guild_client(
    config: GuildApiConfig | None = None,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> GuildClient:
    """Build a client for the configured REST backend."""

    effective = config or get_api_config()
    session = Session()
    if client_factory is None:
        backend = GuildApiClient(config=effective, session=session)
    else:
        backend = GuildApiClient(config=effective, session=session, client_factory=client_factory)
    log.debug("Guild client configured for %s", effective.base_url)
    return GuildClient(backend, session=session)


__all__ = ["GuildClient", "build_guild_client"]
