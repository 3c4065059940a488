from __future__ import annotations

import pytest

from guildledger.domain.editing import Editable, EditStateError
from tests.support.guild_backend import make_entry


def test_stage_changes_draft_only() -> None:
    editor = Editable(make_entry(needed=10))

    editor.begin()
    editor.stage(needed=25)

    assert editor.canonical.needed == 10
    assert editor.draft is not None
    assert editor.draft.needed == 25
    assert editor.displayed.needed == 25


def test_stage_before_begin_is_an_error() -> None:
    editor = Editable(make_entry())

    with pytest.raises(EditStateError):
        editor.stage(needed=1)


def test_commit_moves_draft_to_pending_and_resolve_replaces_canonical() -> None:
    editor = Editable(make_entry(needed=10))
    editor.begin()
    editor.stage(needed=12)

    pending = editor.commit()

    assert editor.draft is None
    assert editor.pending is pending
    assert editor.displayed.needed == 12

    editor.resolve(make_entry(needed=12, completed=1))

    assert not editor.is_pending
    assert editor.canonical.completed == 1


def test_reject_discards_draft_and_pending() -> None:
    original = make_entry(needed=10)
    editor = Editable(original)
    editor.begin()
    editor.stage(needed=99)
    editor.commit()

    editor.reject()

    assert editor.canonical is original
    assert editor.draft is None
    assert editor.pending is None


def test_observe_is_ignored_while_pending() -> None:
    editor = Editable(make_entry(needed=10))
    editor.begin()
    editor.stage(needed=11)
    editor.commit()

    editor.observe(make_entry(needed=50))
    assert editor.canonical.needed == 10

    editor.reject()
    editor.observe(make_entry(needed=50))
    assert editor.canonical.needed == 50


def test_second_commit_while_pending_is_refused() -> None:
    editor = Editable(make_entry())
    editor.begin()
    editor.stage(needed=1)
    editor.commit()
    editor.begin()
    editor.stage(needed=2)

    with pytest.raises(EditStateError):
        editor.commit()


def test_send_puts_value_in_flight_without_touching_the_draft() -> None:
    editor = Editable(make_entry(needed=10))
    editor.begin()
    editor.stage(assigned=4)

    editor.send(make_entry(needed=10, completed=3))

    assert editor.pending is not None
    assert editor.pending.completed == 3
    assert editor.draft is not None
    assert editor.draft.assigned == 4
    with pytest.raises(EditStateError):
        editor.send(make_entry(needed=11))

    editor.reject(keep_draft=True)

    assert editor.pending is None
    assert editor.draft is not None
