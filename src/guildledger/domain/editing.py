"""Three-slot edit state for a backend-owned record.

``canonical`` is the last value confirmed by the backend, ``draft`` is an
unsubmitted local edit, ``pending`` is the value currently in flight.

Transitions::

    begin    draft   := canonical          (no-op if already drafting)
    stage    draft   := draft with change  (never touches the network)
    commit   pending := draft, draft := None
    send     pending := value               (draft untouched)
    resolve  canonical := server value, pending := None
    reject   pending := None, draft := None  (canonical untouched; the draft
             survives with keep_draft=True)
    observe  canonical := fresh read, unless a mutation is pending
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any


class EditStateError(RuntimeError):
    """Raised when an edit transition is not valid in the current state."""


class Editable[T]:
    def __init__(self, canonical: T) -> None:
        self._canonical = canonical
        self._draft: T | None = None
        self._pending: T | None = None

    def __repr__(self) -> str:
        return (
            f"Editable(canonical={self._canonical!r}, draft={self._draft!r}, "
            f"pending={self._pending!r})"
        )

    @property
    def canonical(self) -> T:
        return self._canonical

    @property
    def draft(self) -> T | None:
        return self._draft

    @property
    def pending(self) -> T | None:
        return self._pending

    @property
    def is_editing(self) -> bool:
        return self._draft is not None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    @property
    def displayed(self) -> T:
        """What a view should show: the draft, else the in-flight value, else canonical."""
        if self._draft is not None:
            return self._draft
        if self._pending is not None:
            return self._pending
        return self._canonical

    def begin(self) -> T:
        if self._draft is None:
            self._draft = self._canonical
        return self._draft

    def stage(self, **changes: Any) -> T:
        if self._draft is None:
            raise EditStateError("stage() called before begin()")
        self._draft = replace(self._draft, **changes)  # type: ignore[type-var]
        return self._draft

    def discard(self) -> None:
        self._draft = None

    def commit(self) -> T:
        if self._draft is None:
            raise EditStateError("Nothing to commit")
        if self._pending is not None:
            raise EditStateError("A previous commit has not resolved yet")
        self._pending = self._draft
        self._draft = None
        return self._pending

    def send(self, value: T) -> T:
        """Put a value in flight that did not come from the draft."""
        if self._pending is not None:
            raise EditStateError("A previous commit has not resolved yet")
        self._pending = value
        return value

    def resolve(self, canonical: T) -> None:
        self._canonical = canonical
        self._pending = None

    def reject(self, *, keep_draft: bool = False) -> None:
        # The rejected draft is dropped; the next edit starts from canonical.
        self._pending = None
        if not keep_draft:
            self._draft = None

    def observe(self, canonical: T) -> None:
        if self._pending is None:
            self._canonical = canonical


__all__ = ["EditStateError", "Editable"]
