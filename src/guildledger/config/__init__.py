"""Application configuration helpers."""

from __future__ import annotations

from guildledger.common.logging import configure_logging

from .api import GuildApiConfig, build_resilience_config, get_api_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

__all__ = [
    "ConfigurationError",
    "GuildApiConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "build_resilience_config",
    "configure_logging",
    "get_api_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
