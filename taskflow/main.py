from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from taskflow.config import SETTINGS
from taskflow.domain.enums import TaskFrequency
from taskflow.domain.errors import TaskFlowError, ValidationError
from taskflow.infra.db import create_schema, init_db
from taskflow.infra.logging import setup_logging
from taskflow.infra.repository import TaskRepository
from taskflow.services.export import usage_filename
from taskflow.services.streaks import next_tier, pick_tier, progress_to_next
from taskflow.services.task_service import TaskService

logger = logging.getLogger(__name__)

STATUS_MARKS = {
    None: "[ ]",
    "completed": "[x]",
    "missed": "[-]",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskflow", description="Track recurring tasks and streaks.")
    parser.add_argument("--user", default=SETTINGS.user_id, help="user id to act as")
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="create a task")
    add.add_argument("title")
    add.add_argument("--description", default="")
    add.add_argument("--frequency", choices=[f.value for f in TaskFrequency], default=TaskFrequency.DAILY.value)

    commands.add_parser("list", help="list tasks with today's status")

    toggle = commands.add_parser("toggle", help="cycle today's status: completed, missed, unmarked")
    toggle.add_argument("task_id", type=int)

    pause = commands.add_parser("pause", help="stop counting a task")
    pause.add_argument("task_id", type=int)
    resume = commands.add_parser("resume", help="count a paused task again")
    resume.add_argument("task_id", type=int)

    edit = commands.add_parser("edit", help="change a task")
    edit.add_argument("task_id", type=int)
    edit.add_argument("--title")
    edit.add_argument("--description")
    edit.add_argument("--frequency", choices=[f.value for f in TaskFrequency])

    delete = commands.add_parser("delete", help="delete a task")
    delete.add_argument("task_id", type=int)
    delete.add_argument("--yes", action="store_true", help="skip confirmation")

    commands.add_parser("stats", help="show weekly and monthly productivity")

    export = commands.add_parser("export", help="write the 30-day usage CSV")
    export.add_argument("--output", type=Path)
    return parser


def _confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def _require_task(service: TaskService, task_id: int):
    task = service.get_task(task_id)
    if task is None:
        raise ValidationError(f"Task {task_id} not found.")
    return task


def _print_tasks(service: TaskService) -> None:
    if not service.tasks:
        print("No tasks yet.")
        return
    today = service.today()
    for task in service.tasks:
        status = task.status_on(today)
        mark = STATUS_MARKS[status.value if status else None]
        paused = "" if task.active else " (paused)"
        print(f"{mark} {task.id:>4}  {task.title} [{task.frequency.value}]{paused}")


def _print_stats(service: TaskService) -> None:
    stats = service.stats
    for label, window in (("Last 7 days", stats.weekly_stats), ("Last 30 days", stats.monthly_stats)):
        print(
            f"{label}: {window.productivity}% "
            f"({window.completed} completed, {window.missed} missed, {window.total} total)"
        )
    tier = pick_tier(stats.streak)
    upcoming = next_tier(tier)
    print(f"Streak: {stats.streak} days, {tier.name} ({tier.subtitle})")
    if upcoming:
        print(f"Next badge: {upcoming.name} at {upcoming.min_days} days ({progress_to_next(stats.streak)}%)")
    else:
        print("Top badge reached")
    for point in stats.weekly_chart_data:
        print(f"  {point.date}  {'#' * point.completed}{'.' * point.missed}")


def run(args: argparse.Namespace, service: TaskService) -> None:
    if args.command == "add":
        task_id = service.add_task(args.title, args.description, args.frequency)
        print(f"Created task {task_id}.")
    elif args.command == "list":
        _print_tasks(service)
    elif args.command == "toggle":
        status = service.cycle_today_status(_require_task(service, args.task_id))
        print(f"Today: {status.value if status else 'unmarked'}")
    elif args.command in ("pause", "resume"):
        service.set_active(args.task_id, args.command == "resume")
    elif args.command == "edit":
        changes = {
            key: value
            for key, value in (
                ("title", args.title),
                ("description", args.description),
                ("frequency", args.frequency),
            )
            if value is not None
        }
        service.update_task(args.task_id, **changes)
    elif args.command == "delete":
        task = _require_task(service, args.task_id)
        confirm = None if args.yes else (lambda: _confirm(f'Delete "{task.title}"? This cannot be undone.'))
        if not service.delete_task(task.id, confirm=confirm):
            print("Cancelled.")
    elif args.command == "stats":
        _print_stats(service)
    elif args.command == "export":
        output = args.output
        if output is None:
            base = Path(SETTINGS.export_dir) if SETTINGS.export_dir else Path.cwd()
            output = base / usage_filename(service.today())
        service.export_usage(output)
        print(f"Saved {output}")


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    try:
        init_db()
        create_schema()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Database is not reachable")
        print(f"DB error: {exc}", file=sys.stderr)
        return 1

    service = TaskService(TaskRepository(), args.user)
    service.start()
    try:
        if service.error:
            print(service.error, file=sys.stderr)
            return 1
        run(args, service)
    except TaskFlowError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        service.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
