"""Guild backend configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class GuildApiConfig:
    """Holds the REST endpoint and optional login credentials."""

    base_url: str
    resilience: ResilienceConfig
    username: str | None = None
    password: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


def _normalize_base_url(value: str) -> str:
    normalized = value.strip().rstrip("/")
    if not normalized.startswith(("http://", "https://")):
        raise ConfigurationError(f"GUILDLEDGER_API_URL must be an http(s) URL, got {value!r}")
    return normalized + "/"


def build_resilience_config(
    base_url: str,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ratelimit: RateLimit | None = None,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="guild-api",
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        ratelimit=ratelimit,
        default_headers={"Content-Type": "application/json"},
    )


def get_api_config(*, resilience: ResilienceConfig | None = None) -> GuildApiConfig:
    values = require_env_vars(("GUILDLEDGER_API_URL",))
    base_url = _normalize_base_url(values["GUILDLEDGER_API_URL"])
    timeout = env_float("GUILDLEDGER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
    return GuildApiConfig(
        base_url=base_url,
        resilience=resilience or build_resilience_config(base_url, timeout_seconds=timeout),
        username=optional_env_var("GUILDLEDGER_USERNAME"),
        password=optional_env_var("GUILDLEDGER_PASSWORD"),
    )
