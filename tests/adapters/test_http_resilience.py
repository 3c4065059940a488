from __future__ import annotations

import asyncio

import httpx

from guildledger.adapters.http_resilience import ResilientClient, build_retry
from guildledger.config import RateLimit, ResilienceConfig, RetryPolicy


def test_build_retry_copies_policy() -> None:
    retry = build_retry(RetryPolicy(total=5, backoff_factor=0.1))

    assert retry.total == 5
    assert retry.backoff_factor == 0.1


def test_client_applies_base_url_headers_and_rate_limit() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    config = ResilienceConfig(
        name="test",
        base_url="https://guild.test/api/",
        retry=None,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Content-Type": "application/json"},
    )

    async def scenario() -> None:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            await client.request("GET", "settlements")
            await client.request("POST", "tasks", json={"quantity_requested": 1})

    asyncio.run(scenario())

    assert [(request.method, str(request.url)) for request in seen] == [
        ("GET", "https://guild.test/api/settlements"),
        ("POST", "https://guild.test/api/tasks"),
    ]
    assert seen[0].headers["Content-Type"] == "application/json"


def test_retry_transport_replays_failed_reads() -> None:
    attempts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.method)
        if len(attempts) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json=[])

    config = ResilienceConfig(
        name="test",
        base_url="https://guild.test/api/",
        retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
    )

    async def scenario() -> int:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            response = await client.request("GET", "settlements")
        return response.status_code

    assert asyncio.run(scenario()) == 200
    assert attempts == ["GET", "GET"]
