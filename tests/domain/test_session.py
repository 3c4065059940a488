from __future__ import annotations

import pytest

from guildledger.domain.errors import SessionExpired
from guildledger.domain.model import Role
from guildledger.domain.session import Session
from tests.support.guild_backend import CONTRIBUTOR, COORDINATOR


def test_new_session_is_anonymous() -> None:
    session = Session()

    assert not session.is_active
    assert session.role is None
    with pytest.raises(SessionExpired):
        session.require_token()


def test_open_exposes_token_and_role() -> None:
    session = Session()

    session.open("abc", COORDINATOR)

    assert session.is_active
    assert session.require_token() == "abc"
    assert session.role is Role.COORDINATOR
    assert session.require_account() is COORDINATOR


def test_open_rejects_empty_token() -> None:
    with pytest.raises(ValueError, match="token"):
        Session().open("", COORDINATOR)


def test_close_notifies_listeners_with_reason() -> None:
    session = Session()
    reasons: list[str] = []
    session.on_close(reasons.append)
    session.open("abc", CONTRIBUTOR)

    session.close(reason="expired")

    assert reasons == ["expired"]
    assert session.account is None
    assert session.token is None


def test_reopening_closes_previous_session() -> None:
    session = Session()
    reasons: list[str] = []
    session.on_close(reasons.append)
    session.open("abc", CONTRIBUTOR)

    session.open("def", COORDINATOR)

    assert reasons == ["replaced"]
    assert session.require_token() == "def"
