from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from guildledger.adapters.http_resilience import ResilientClient
from guildledger.app import GuildClient, build_guild_client
from guildledger.config import GuildApiConfig, build_resilience_config
from guildledger.domain.access import View
from guildledger.domain.errors import AuthorizationDenied, SessionExpired
from guildledger.domain.model import Role, TaskStatus
from guildledger.domain.requests import EntryUpdate
from tests.support.guild_backend import make_entry, make_task

if TYPE_CHECKING:
    from collections.abc import Callable

    from guildledger.config import ResilienceConfig
    from tests.support.guild_backend import FakeGuildBackend


def test_login_lands_on_role_default_view(client: GuildClient) -> None:
    decision = asyncio.run(client.login("gm", "secret"))

    assert decision.allowed
    assert decision.redirect_to == View.DASHBOARD
    assert client.account is not None
    assert client.account.role is Role.COORDINATOR


def test_login_replays_remembered_destination(client: GuildClient) -> None:
    client.gate.check(destination="/settlements/A/resources")

    decision = asyncio.run(client.login("miner", "secret"))

    assert decision.redirect_to == "/settlements/A/resources"


def test_failed_login_leaves_session_closed(client: GuildClient) -> None:
    with pytest.raises(AuthorizationDenied):
        asyncio.run(client.login("gm", "nope"))

    assert not client.session.is_active


def test_logout_clears_cache_and_edit_state(
    coordinator: GuildClient, backend: FakeGuildBackend
) -> None:
    backend.add_entry(make_entry("e1"))

    async def scenario() -> None:
        await coordinator.ledger.list_entries("A")
        coordinator.ledger.begin_edit("e1")
        await coordinator.logout()

    asyncio.run(scenario())

    assert coordinator.cache.keys() == ()
    assert not coordinator.session.is_active
    with pytest.raises(LookupError):
        coordinator.ledger.editor("e1")
    assert backend.call_counts["logout"] == 1


def test_logout_closes_session_even_when_backend_fails(
    coordinator: GuildClient, backend: FakeGuildBackend
) -> None:
    backend.fail_next("logout", RuntimeError("offline"))

    with pytest.raises(RuntimeError):
        asyncio.run(coordinator.logout())

    assert not coordinator.session.is_active


def test_logout_without_session_is_a_no_op(client: GuildClient, backend: FakeGuildBackend) -> None:
    asyncio.run(client.logout())

    assert backend.call_counts["logout"] == 0


def test_assignment_summary(contributor: GuildClient, backend: FakeGuildBackend) -> None:
    backend.add_task(
        make_task("1", quantity_requested=10, quantity_completed=5, status=TaskStatus.IN_PROGRESS)
    )
    backend.add_task(make_task("2", quantity_requested=10))
    backend.add_task(make_task("3", assigned_to="99", quantity_requested=10))

    summary = asyncio.run(contributor.assignment_summary())

    assert summary.total == 2
    assert summary.in_progress == 1
    assert summary.completion_rate == 25


def test_context_manager_closes_backend(backend: FakeGuildBackend) -> None:
    async def scenario() -> None:
        async with GuildClient(backend):
            pass

    asyncio.run(scenario())

    assert backend.closed


def _http_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


def test_expired_token_clears_session_and_cache_end_to_end() -> None:
    base_url = "https://guild.test/api/"
    state = {"expired": False}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/auth/login":
            return httpx.Response(
                200, json={"token": "tok", "user": {"id": 2, "username": "miner", "role": "member"}}
            )
        if state["expired"]:
            return httpx.Response(401, json={"error": "Token expired"})
        if path == "/api/settlements/1/resources":
            return httpx.Response(
                200,
                json=[
                    {
                        "id": 5,
                        "settlement_id": 1,
                        "resource_id": 12,
                        "category": "Mining",
                        "quantity_needed": 500,
                    }
                ],
            )
        if path == "/api/tasks/my":
            return httpx.Response(200, json=[])
        return httpx.Response(404, json={"error": "Not found"})

    config = GuildApiConfig(base_url=base_url, resilience=build_resilience_config(base_url))

    async def scenario() -> GuildClient:
        client = build_guild_client(config, client_factory=_http_factory(handler))
        async with client:
            await client.login("miner", "secret")
            await client.ledger.list_entries("1")
            assert client.cache.keys()

            state["expired"] = True
            with pytest.raises(SessionExpired):
                await client.tasks.my_tasks()
        return client

    client = asyncio.run(scenario())

    assert not client.session.is_active
    assert client.cache.keys() == ()
    assert client.gate.check(destination="/my-tasks").redirect_to == View.LOGIN
    with pytest.raises(SessionExpired):
        asyncio.run(client.ledger.update_entry("5", EntryUpdate(completed=1)))


def test_build_guild_client_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GUILDLEDGER_API_URL", "http://localhost:3000/api")

    client = build_guild_client()

    assert client.session.account is None
    assert client.backend.config.base_url == "http://localhost:3000/api/"  # type: ignore[attr-defined]
    asyncio.run(client.aclose())

