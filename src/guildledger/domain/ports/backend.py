"""Port for the REST backend of record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from guildledger.domain.model import (
        Account,
        ResourceCategory,
        ResourceInventoryEntry,
        Settlement,
        Task,
        TaskFilters,
        TaskPage,
    )
    from guildledger.domain.requests import (
        EntryUpdate,
        NewPlayer,
        NewSettlement,
        NewTask,
        SettlementChanges,
        TaskChanges,
        TaskReport,
    )


@dataclass(frozen=True, slots=True)
class LoginResult:
    token: str
    account: Account

    def __repr__(self) -> str:
        return f"LoginResult(account={self.account!r})"


@runtime_checkable
class GuildBackend(Protocol):
    """Every call returns the canonical state the backend now holds.

    Implementations raise the errors from ``guildledger.domain.errors``.
    """

    async def login(self, username: str, password: str) -> LoginResult: ...

    async def logout(self) -> None: ...

    async def current_account(self) -> Account: ...

    async def list_settlements(self) -> list[Settlement]: ...

    async def get_settlement(self, settlement_id: str) -> Settlement: ...

    async def create_settlement(self, request: NewSettlement) -> Settlement: ...

    async def update_settlement(
        self, settlement_id: str, changes: SettlementChanges
    ) -> Settlement: ...

    async def delete_settlement(self, settlement_id: str) -> None: ...

    async def list_resource_entries(
        self, settlement_id: str, category: ResourceCategory | None = None
    ) -> list[ResourceInventoryEntry]: ...

    async def update_resource_entry(
        self, settlement_id: str, entry_id: str, update: EntryUpdate
    ) -> ResourceInventoryEntry: ...

    async def list_tasks(self, filters: TaskFilters) -> TaskPage: ...

    async def my_tasks(self) -> list[Task]: ...

    async def create_task(self, request: NewTask) -> Task: ...

    async def update_task(self, task_id: str, changes: TaskChanges | TaskReport) -> Task: ...

    async def delete_task(self, task_id: str) -> None: ...

    async def list_players(self) -> list[Account]: ...

    async def get_player(self, player_id: str) -> Account: ...

    async def create_player(self, request: NewPlayer) -> Account: ...

    async def aclose(self) -> None: ...


__all__ = ["GuildBackend", "LoginResult"]
