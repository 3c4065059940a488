# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from guildledger.app import build_guild_client
from guildledger.config import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_api_config,
)
from guildledger.domain.access import Capability
from guildledger.domain.ledger import entry_progress
from guildledger.domain.lifecycle import is_overdue, task_progress
from guildledger.domain.model import ResourceCategory, TaskFilters

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from guildledger.app import GuildClient
    from guildledger.config import GuildApiConfig
    from guildledger.domain.model import ResourceInventoryEntry, Settlement, Task

log = logging.getLogger(__name__)


def _parse_category(value: str) -> ResourceCategory:
    normalized = value.strip().capitalize()
    try:
        return ResourceCategory(normalized)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Unknown resource category: {value}") from exc


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Guild resource and task ledger")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("settlements", help="List settlements")

    resources = subparsers.add_parser("resources", help="Show a settlement's resource ledger")
    resources.add_argument("--settlement", required=True, help="Settlement id")
    resources.add_argument(
        "--category",
        type=_parse_category,
        help="Restrict to one resource category (e.g. Mining)",
    )

    tasks = subparsers.add_parser("tasks", help="List tasks")
    tasks.add_argument(
        "--all",
        action="store_true",
        help="List every task instead of your own assignments (coordinators only)",
    )

    report = subparsers.add_parser("report", help="Report progress on a task")
    report.add_argument("task_id", help="Task id")
    report.add_argument("quantity", type=int, help="Total quantity completed so far")

    cancel = subparsers.add_parser("cancel", help="Cancel a task (coordinators only)")
    cancel.add_argument("task_id", help="Task id")

    return parser.parse_args(list(argv))


def _format_settlement(settlement: Settlement) -> str:
    return f"{settlement.id:>6}  T{settlement.tier}  {settlement.name}"


def _format_entry(entry: ResourceInventoryEntry) -> str:
    return (
        f"{entry.resource_name:<28} {entry.category:<14} "
        f"needed={entry.needed:<6} assigned={entry.assigned:<6} "
        f"completed={entry.completed:<6} {entry_progress(entry):5.1f}%"
    )


def _format_task(task: Task) -> str:
    flag = " OVERDUE" if is_overdue(task) else ""
    return (
        f"{task.id:>6}  {task.status:<11} {task.quantity_completed}/{task.quantity_requested} "
        f"{task.resource_name or task.resource_id} @ {task.settlement_name or task.settlement_id} "
        f"({task_progress(task):.0f}%){flag}"
    )


async def _load_task(client: GuildClient, task_id: str) -> Task:
    """Make ``task_id`` known to the task board, paging through lists as needed."""

    for task in await client.tasks.my_tasks():
        if task.id == task_id:
            return task
    if client.gate.can(Capability.VIEW_ALL_TASKS):
        page_number = 1
        while True:
            page = await client.tasks.list_tasks(TaskFilters(page=page_number))
            for task in page.tasks:
                if task.id == task_id:
                    return task
            if page.pagination is None or page_number >= page.pagination.total_pages:
                break
            page_number += 1
    raise LookupError(f"Task {task_id} not found")


async def _dispatch(client: GuildClient, args: argparse.Namespace) -> None:
    if args.command == "settlements":
        for settlement in await client.directory.list_settlements():
            print(_format_settlement(settlement))
    elif args.command == "resources":
        for entry in await client.ledger.list_entries(args.settlement, args.category):
            print(_format_entry(entry))
    elif args.command == "tasks":
        if args.all:
            tasks = (await client.tasks.list_tasks()).tasks
        else:
            tasks = await client.tasks.my_tasks()
        for task in tasks:
            print(_format_task(task))
        if not args.all:
            summary = await client.assignment_summary()
            print(
                f"pending={summary.pending} in_progress={summary.in_progress} "
                f"completed={summary.completed} overdue={summary.overdue} "
                f"rate={summary.completion_rate}%"
            )
    elif args.command == "report":
        await _load_task(client, args.task_id)
        print(_format_task(await client.tasks.report_progress(args.task_id, args.quantity)))
    elif args.command == "cancel":
        await _load_task(client, args.task_id)
        print(_format_task(await client.tasks.cancel_task(args.task_id)))
    else:
        raise ValueError(f"Unsupported command: {args.command}")


async def _run(config: GuildApiConfig, args: argparse.Namespace) -> None:
    async with build_guild_client(config) as client:
        await client.login(config.username or "", config.password or "")
        try:
            await _dispatch(client, args)
        finally:
            await client.logout()


def _load_config() -> GuildApiConfig:
    config = get_api_config()
    credentials = {
        "GUILDLEDGER_USERNAME": config.username,
        "GUILDLEDGER_PASSWORD": config.password,
    }
    missing = [name for name, value in credentials.items() if not value]
    if missing:
        raise MissingConfigurationError(missing)
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        config = _load_config()
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)

    try:
        asyncio.run(_run(config, parsed_args))
    except Exception:
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
