from __future__ import annotations

import os

import pytest

from guildledger.config import (
    ConfigurationError,
    MissingConfigurationError,
    RetryPolicy,
    get_api_config,
    require_env_var,
    require_env_vars,
)
from guildledger.config.env import env_float


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    monkeypatch.setenv("BLANK_VAR", " ")
    monkeypatch.setenv("PRESENT_VAR", "ok")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["PRESENT_VAR", "MISSING_VAR", "BLANK_VAR"])

    assert exc.value.names == ("BLANK_VAR", "MISSING_VAR")
    assert str(exc.value) == "Missing configuration for: BLANK_VAR, MISSING_VAR"


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_require_env_vars_restores_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMP_VAR", "123")

    assert os.getenv("TEMP_VAR") == "123"
    result = require_env_var("TEMP_VAR")
    assert result == "123"


def test_env_float_validates_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TIMEOUT_VAR", raising=False)
    assert env_float("TIMEOUT_VAR", 4.0) == 4.0

    monkeypatch.setenv("TIMEOUT_VAR", "2.5")
    assert env_float("TIMEOUT_VAR", 4.0) == 2.5

    monkeypatch.setenv("TIMEOUT_VAR", "soon")
    with pytest.raises(ConfigurationError):
        env_float("TIMEOUT_VAR", 4.0)

    monkeypatch.setenv("TIMEOUT_VAR", "0")
    with pytest.raises(ConfigurationError):
        env_float("TIMEOUT_VAR", 4.0)


def test_get_api_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GUILDLEDGER_API_URL", " https://guild.example/api// ")
    monkeypatch.setenv("GUILDLEDGER_USERNAME", "gm")
    monkeypatch.setenv("GUILDLEDGER_PASSWORD", "secret")
    monkeypatch.setenv("GUILDLEDGER_TIMEOUT_SECONDS", "5")

    config = get_api_config()

    assert config.base_url == "https://guild.example/api/"
    assert config.has_credentials
    assert config.resilience.base_url == config.base_url
    assert config.resilience.timeout_seconds == 5.0
    assert config.resilience.retry is not None
    assert config.resilience.retry.allowed_methods == frozenset({"GET", "HEAD", "OPTIONS"})


def test_get_api_config_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GUILDLEDGER_API_URL", raising=False)

    with pytest.raises(MissingConfigurationError, match="GUILDLEDGER_API_URL"):
        get_api_config()


def test_get_api_config_rejects_non_http_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GUILDLEDGER_API_URL", "ftp://guild.example")

    with pytest.raises(ConfigurationError):
        get_api_config()


def test_credentials_are_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GUILDLEDGER_API_URL", "http://localhost:3000/api")
    monkeypatch.delenv("GUILDLEDGER_USERNAME", raising=False)
    monkeypatch.delenv("GUILDLEDGER_PASSWORD", raising=False)

    assert not get_api_config().has_credentials


def test_retry_policy_refuses_mutating_methods() -> None:
    with pytest.raises(ValueError, match="idempotent"):
        RetryPolicy(allowed_methods=frozenset({"GET", "PUT"}))
