"""Per-settlement resource demand ledger.

Each inventory entry carries three quantities (needed, assigned, completed).
Reads go through the read-model cache; writes are partial updates issued
through the mutation serializer, and only ever on an explicit commit.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from guildledger.domain.access import Capability
from guildledger.domain.cache import CacheKey
from guildledger.domain.editing import Editable, EditStateError
from guildledger.domain.errors import ConflictInProgress
from guildledger.domain.model import EntityKind, ResourceCategory, ResourceInventoryEntry
from guildledger.domain.requests import EntryUpdate
from guildledger.domain.serializer import Invalidation

if TYPE_CHECKING:
    from guildledger.domain.access import AccessGate
    from guildledger.domain.cache import ReadModelCache
    from guildledger.domain.ports import GuildBackend
    from guildledger.domain.serializer import MutationSerializer

log = getLogger(__name__)

QUANTITY_FIELDS: Final[tuple[str, ...]] = ("needed", "assigned", "completed")


def coerce_quantity(raw: object) -> int:
    """Turn user input into a non-negative integer; anything unusable becomes 0."""

    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, int):
        return max(raw, 0)
    if isinstance(raw, float):
        return max(int(raw), 0) if math.isfinite(raw) else 0
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return max(int(text), 0)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return 0
        return max(int(value), 0) if math.isfinite(value) else 0
    return 0


def progress_percentage(completed: int, needed: int) -> float:
    """Display-only progress, clamped to ``[0, 100]``. Never persisted."""

    if needed <= 0:
        return 0.0
    return max(min(completed / needed, 1.0), 0.0) * 100


def entry_progress(entry: ResourceInventoryEntry) -> float:
    return progress_percentage(entry.completed, entry.needed)


def _coerce_update(update: EntryUpdate | Mapping[str, object]) -> EntryUpdate:
    if isinstance(update, EntryUpdate):
        return update
    unknown = set(update) - set(QUANTITY_FIELDS)
    if unknown:
        raise ValueError(f"Unknown quantity field(s): {', '.join(sorted(unknown))}")
    return EntryUpdate(**{name: coerce_quantity(value) for name, value in update.items()})


class ResourceLedger:
    def __init__(
        self,
        *,
        backend: GuildBackend,
        gate: AccessGate,
        cache: ReadModelCache,
        serializer: MutationSerializer,
    ) -> None:
        self._backend = backend
        self._gate = gate
        self._cache = cache
        self._serializer = serializer
        self._editors: dict[str, Editable[ResourceInventoryEntry]] = {}

    @staticmethod
    def list_key(settlement_id: str, category: ResourceCategory | None = None) -> CacheKey:
        return CacheKey.of(
            EntityKind.RESOURCE_ENTRIES, settlement_id=settlement_id, category=category
        )

    def reset(self) -> None:
        self._editors.clear()

    # ------------------------------------------------------------------
    # Reads

    async def list_entries(
        self, settlement_id: str, category: ResourceCategory | None = None
    ) -> tuple[ResourceInventoryEntry, ...]:
        self._gate.require(Capability.VIEW_RESOURCES)

        async def fetch() -> tuple[ResourceInventoryEntry, ...]:
            return tuple(await self._backend.list_resource_entries(settlement_id, category))

        result = await self._cache.read(self.list_key(settlement_id, category), fetch)
        if result.current:
            for entry in result.value:
                self._observe(entry)
        else:
            log.debug("Not observing superseded entries for settlement %s", settlement_id)
        return result.value

    def entry(self, entry_id: str) -> ResourceInventoryEntry:
        """Last canonical value known for ``entry_id``."""
        return self.editor(entry_id).canonical

    def editor(self, entry_id: str) -> Editable[ResourceInventoryEntry]:
        try:
            return self._editors[entry_id]
        except KeyError:
            raise LookupError(f"Unknown inventory entry {entry_id}; list it first") from None

    def _observe(self, entry: ResourceInventoryEntry) -> None:
        editor = self._editors.get(entry.id)
        if editor is None:
            self._editors[entry.id] = Editable(entry)
        else:
            editor.observe(entry)

    # ------------------------------------------------------------------
    # Edit session

    def begin_edit(self, entry_id: str) -> ResourceInventoryEntry:
        self._gate.require(Capability.EDIT_RESOURCES)
        return self.editor(entry_id).begin()

    def stage(self, entry_id: str, field: str, raw_value: object) -> ResourceInventoryEntry:
        """Record a keystroke-level change in the draft. Never issues a mutation."""
        if field not in QUANTITY_FIELDS:
            raise ValueError(f"Unknown quantity field: {field}")
        return self.editor(entry_id).stage(**{field: coerce_quantity(raw_value)})

    def cancel_edit(self, entry_id: str) -> None:
        self.editor(entry_id).discard()

    async def commit_edit(self, entry_id: str) -> ResourceInventoryEntry:
        """Submit the fields of the draft that differ from the canonical value."""

        editor = self.editor(entry_id)
        draft = editor.draft
        if draft is None:
            raise EditStateError(f"No edit in progress for {entry_id}")
        canonical = editor.canonical
        changed = {
            name: getattr(draft, name)
            for name in QUANTITY_FIELDS
            if getattr(draft, name) != getattr(canonical, name)
        }
        if not changed:
            editor.discard()
            return canonical
        self._gate.require(Capability.EDIT_RESOURCES)
        return await self._submit(editor, EntryUpdate(**changed), from_draft=True)

    # ------------------------------------------------------------------
    # Mutations

    async def update_entry(
        self, entry_id: str, update: EntryUpdate | Mapping[str, object]
    ) -> ResourceInventoryEntry:
        """Apply a partial quantity update and return the canonical entry.

        Fields absent from ``update`` keep their server values. The in-flight
        value is the canonical entry with ``update`` applied; an open draft is
        left alone. On failure the canonical value is kept and the error
        propagates.
        """

        self._gate.require(Capability.EDIT_RESOURCES)
        editor = self.editor(entry_id)
        payload = _coerce_update(update)
        if payload.is_empty:
            return editor.canonical
        return await self._submit(editor, payload, from_draft=False)

    async def _submit(
        self,
        editor: Editable[ResourceInventoryEntry],
        payload: EntryUpdate,
        *,
        from_draft: bool,
    ) -> ResourceInventoryEntry:
        current = editor.canonical
        entry_id = current.id

        async def mutate() -> ResourceInventoryEntry:
            if from_draft:
                editor.commit()
            else:
                editor.send(replace(current, **payload.changes()))
            return await self._backend.update_resource_entry(
                current.settlement_id, entry_id, payload
            )

        try:
            updated = await self._serializer.submit(
                current.mutation_key,
                mutate,
                invalidates=(
                    Invalidation.of(EntityKind.RESOURCE_ENTRY, id=entry_id),
                    Invalidation.of(
                        EntityKind.RESOURCE_ENTRIES,
                        settlement_id=current.settlement_id,
                        category=current.category,
                    ),
                ),
            )
        except ConflictInProgress:
            raise
        except Exception:
            editor.reject(keep_draft=not from_draft)
            raise

        editor.resolve(updated)
        log.info(
            "Updated %s in settlement %s: %s",
            updated.resource_name or entry_id,
            updated.settlement_id,
            payload.changes(),
        )
        return updated


__all__ = [
    "QUANTITY_FIELDS",
    "ResourceLedger",
    "coerce_quantity",
    "entry_progress",
    "progress_percentage",
]
