"""Errors raised while reading guildledger settings from the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """A ``GUILDLEDGER_*`` setting is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """Required ``GUILDLEDGER_*`` variables are unset or blank.

    ``names`` lists the variables to set, sorted, so callers can report them
    without parsing the message.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
