"""Task reads and mutations for both roles.

Coordinators create, edit, cancel and delete tasks; contributors report
progress on tasks assigned to them. Every mutation is keyed by the task id
in the mutation serializer and invalidates the task's own key, task lists
for its settlement, and the assignee's assignment list.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from guildledger.domain import lifecycle
from guildledger.domain.access import Capability
from guildledger.domain.cache import CacheKey
from guildledger.domain.errors import AuthorizationDenied, TaskClosed
from guildledger.domain.model import EntityKind, Task, TaskFilters, TaskPage
from guildledger.domain.requests import TaskReport
from guildledger.domain.serializer import Invalidation

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from guildledger.domain.access import AccessGate
    from guildledger.domain.cache import ReadModelCache
    from guildledger.domain.ports import GuildBackend
    from guildledger.domain.requests import NewTask, TaskChanges
    from guildledger.domain.serializer import MutationSerializer
    from guildledger.domain.session import Session

log = getLogger(__name__)


def _invalidations(task: Task) -> tuple[Invalidation, ...]:
    return (
        Invalidation.of(EntityKind.TASK, id=task.id),
        Invalidation.of(EntityKind.TASKS, settlement_id=task.settlement_id),
        Invalidation.of(EntityKind.MY_TASKS, assigned_to=task.assigned_to),
    )


class TaskBoard:
    def __init__(
        self,
        *,
        backend: GuildBackend,
        session: Session,
        gate: AccessGate,
        cache: ReadModelCache,
        serializer: MutationSerializer,
    ) -> None:
        self._backend = backend
        self._session = session
        self._gate = gate
        self._cache = cache
        self._serializer = serializer
        self._known: dict[str, Task] = {}

    def reset(self) -> None:
        self._known.clear()

    def task(self, task_id: str) -> Task:
        try:
            return self._known[task_id]
        except KeyError:
            raise LookupError(f"Unknown task {task_id}; list it first") from None

    def _remember(self, tasks: Iterable[Task], *, current: bool) -> None:
        # A superseded read may predate a mutation this board already applied.
        if not current:
            log.debug("Not remembering superseded task list")
            return
        for task in tasks:
            self._known[task.id] = task

    # ------------------------------------------------------------------
    # Reads

    async def list_tasks(self, filters: TaskFilters | None = None) -> TaskPage:
        self._gate.require(Capability.VIEW_ALL_TASKS)
        effective = filters or TaskFilters()
        key = CacheKey.of(EntityKind.TASKS, **effective.as_params())

        async def fetch() -> TaskPage:
            return await self._backend.list_tasks(effective)

        result = await self._cache.read(key, fetch)
        page = result.value
        self._remember(page.tasks, current=result.current)
        return page

    async def my_tasks(self) -> tuple[Task, ...]:
        self._gate.require(Capability.VIEW_OWN_TASKS)
        account = self._session.require_account()
        key = CacheKey.of(EntityKind.MY_TASKS, assigned_to=account.id)

        async def fetch() -> tuple[Task, ...]:
            return tuple(await self._backend.my_tasks())

        result = await self._cache.read(key, fetch)
        self._remember(result.value, current=result.current)
        return result.value

    # ------------------------------------------------------------------
    # Mutations

    async def _mutate(
        self, task: Task, action: str, mutation: Callable[[], Awaitable[Task]]
    ) -> Task:
        updated = await self._serializer.submit(
            task.mutation_key, mutation, invalidates=_invalidations(task)
        )
        if updated.assigned_to != task.assigned_to:
            # Reassignment moves the task between two assignees' lists.
            self._cache.invalidate(EntityKind.MY_TASKS, assigned_to=updated.assigned_to)
        self._known[updated.id] = updated
        log.info("Task %s %s: status=%s", updated.id, action, updated.status)
        return updated

    async def create_task(self, request: NewTask) -> Task:
        self._gate.require(Capability.MANAGE_TASKS)
        key = f"{EntityKind.TASKS}:new:{request.settlement_id}:{request.resource_id}"
        created = await self._serializer.submit(
            key,
            lambda: self._backend.create_task(request),
            invalidates=(
                Invalidation.of(EntityKind.TASKS, settlement_id=request.settlement_id),
                Invalidation.of(EntityKind.MY_TASKS, assigned_to=request.assigned_to),
            ),
        )
        self._known[created.id] = created
        log.info("Created task %s for %s", created.id, created.assigned_to)
        return created

    async def report_progress(self, task_id: str, quantity_completed: object) -> Task:
        """Report the total completed so far; the status is derived, never chosen."""

        self._gate.require(Capability.REPORT_PROGRESS)
        task = self.task(task_id)
        account = self._session.require_account()
        if not account.is_coordinator and task.assigned_to != account.id:
            raise AuthorizationDenied(
                f"Task {task_id} is not assigned to {account.username}",
                capability=Capability.REPORT_PROGRESS,
            )
        target = lifecycle.apply_report(task, quantity_completed)
        report = TaskReport(quantity_completed=target.quantity_completed, status=target.status)
        return await self._mutate(
            task, "reported", lambda: self._backend.update_task(task_id, report)
        )

    async def cancel_task(self, task_id: str) -> Task:
        self._gate.require(Capability.CANCEL_TASKS)
        task = self.task(task_id)
        target = lifecycle.cancel(task)
        report = TaskReport(quantity_completed=target.quantity_completed, status=target.status)
        return await self._mutate(
            task, "cancelled", lambda: self._backend.update_task(task_id, report)
        )

    async def update_task(self, task_id: str, changes: TaskChanges) -> Task:
        self._gate.require(Capability.MANAGE_TASKS)
        task = self.task(task_id)
        if task.is_terminal:
            raise TaskClosed(f"Task {task_id} is {task.status} and can no longer be edited")
        if changes.is_empty:
            return task
        return await self._mutate(
            task, "updated", lambda: self._backend.update_task(task_id, changes)
        )

    async def delete_task(self, task_id: str) -> None:
        self._gate.require(Capability.MANAGE_TASKS)
        task = self.task(task_id)

        async def mutation() -> None:
            await self._backend.delete_task(task_id)

        await self._serializer.submit(
            task.mutation_key, mutation, invalidates=_invalidations(task)
        )
        self._known.pop(task_id, None)
        log.info("Deleted task %s", task_id)


__all__ = ["TaskBoard"]
