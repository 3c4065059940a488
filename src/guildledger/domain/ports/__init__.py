"""Domain port definitions for adapters."""

from __future__ import annotations

from .backend import GuildBackend, LoginResult

__all__ = ["GuildBackend", "LoginResult"]
