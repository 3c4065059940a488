from __future__ import annotations

import pytest

from guildledger.app import GuildClient
from tests.support.guild_backend import CONTRIBUTOR, COORDINATOR, FakeGuildBackend


@pytest.fixture
def backend() -> FakeGuildBackend:
    return FakeGuildBackend()


@pytest.fixture
def client(backend: FakeGuildBackend) -> GuildClient:
    return GuildClient(backend)


@pytest.fixture
def coordinator(client: GuildClient, backend: FakeGuildBackend) -> GuildClient:
    backend.current = COORDINATOR
    client.session.open("token-gm", COORDINATOR)
    return client


@pytest.fixture
def contributor(client: GuildClient, backend: FakeGuildBackend) -> GuildClient:
    backend.current = CONTRIBUTOR
    client.session.open("token-miner", CONTRIBUTOR)
    return client
