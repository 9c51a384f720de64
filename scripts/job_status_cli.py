#!/usr/bin/env python3
"""Command line utilities for inspecting and failing podcast jobs in Redis."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

sys.path.append(".")

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nexuslearn.core.job_state import JOB_STATUS_ORDER, PodcastJob
from nexuslearn.core.job_store import (
    InvalidJobTransitionError,
    JobNotFoundError,
    job_store,
)
from scripts._console_utils import exit_with_error, get_console, status_label

VALID_STATUSES = set(JOB_STATUS_ORDER) | {"error"}
STATUS_STYLES = {
    "queued": "yellow",
    "extracting_text": "bold cyan",
    "generating_script": "bold cyan",
    "generating_audio": "bold cyan",
    "completed": "bold green",
    "error": "bold red",
}

console = get_console()


def _sort_jobs(jobs: list[PodcastJob]) -> list[PodcastJob]:
    """Sort jobs by created_at descending."""
    return sorted(jobs, key=lambda job: job.created_at, reverse=True)


async def fetch_jobs(
    *,
    user_id: str | None = None,
    status: str | None = None,
    limit: int | None = 50,
) -> list[PodcastJob]:
    """Retrieve jobs for one user (or every user) with optional status filtering."""
    if user_id:
        jobs = await job_store.list_jobs(user_id, limit=limit or 10_000)
        if status:
            jobs = [job for job in jobs if job.status == status]
        return jobs

    jobs = []
    cursor: int = 0
    while True:
        cursor, keys = await job_store.redis_client.scan(
            cursor=cursor, match=f"{job_store.key_prefix}:*:podcast_job:*", count=500
        )
        for key in keys:
            key_str = key.decode("utf-8") if isinstance(key, bytes) else str(key)
            raw = await job_store.redis_client.get(key_str)
            if not raw:
                continue
            try:
                job = PodcastJob.from_json(raw)
            except ValueError:
                continue
            if status and job.status != status:
                continue
            jobs.append(job)
        if cursor == 0:
            break
    jobs = _sort_jobs(jobs)
    return jobs[:limit] if limit is not None else jobs


def _job_row(job: PodcastJob) -> list[Any]:
    return [
        job.id,
        Text(job.status, style=STATUS_STYLES.get(job.status, "white")),
        job.created_at.isoformat(timespec="seconds"),
        job.updated_at.isoformat(timespec="seconds"),
        job.user_id,
        f"{job.options.length}/{job.options.tone}",
        job.error_message or "",
    ]


async def cmd_list(args: argparse.Namespace) -> None:
    jobs = await fetch_jobs(
        user_id=args.user,
        status=args.status,
        limit=None if args.all else args.limit,
    )
    if args.json:
        console.print_json(data=[job.to_public_dict() for job in jobs])
        return
    if not jobs:
        console.print("[bold yellow]No podcast jobs found.[/]")
        return
    table = Table(
        title=f"{len(jobs)} job(s) found",
        header_style="bold cyan",
        show_lines=False,
    )
    table.add_column("Job ID", style="bold white")
    table.add_column("Status")
    table.add_column("Created")
    table.add_column("Updated")
    table.add_column("User")
    table.add_column("Options")
    table.add_column("Error", style="bold red")
    for job in jobs:
        table.add_row(*_job_row(job))
    console.print(table)


async def cmd_show(args: argparse.Namespace) -> None:
    job = await job_store.get_job(args.user_id, args.job_id)
    if job is None:
        exit_with_error(f"Podcast job {args.job_id} not found.")
    data = job.to_public_dict()
    if args.json:
        console.print_json(data=data)
        return
    content = Text()
    for key, value in data.items():
        if key == "transcript" and not args.full:
            value = f"{str(value)[:200]}..." if len(str(value)) > 200 else value
        content.append(f"{key}: ", style="bold cyan")
        content.append(f"{value}\n", style="white")
    console.print(
        Panel.fit(content, title=f"Podcast job {args.job_id}", border_style="cyan")
    )


async def cmd_fail(args: argparse.Namespace) -> None:
    try:
        await job_store.fail_job(args.user_id, args.job_id, args.message)
    except JobNotFoundError:
        exit_with_error(f"Podcast job {args.job_id} not found.")
    except InvalidJobTransitionError as exc:
        exit_with_error(str(exc))

    message = Text.assemble(
        status_label("OK", "bold green"),
        Text(" Podcast job ", style="bold white"),
        Text(args.job_id, style="bold cyan"),
        Text(" marked as ", style="bold white"),
        Text("error", style=STATUS_STYLES["error"]),
    )
    console.print(message)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="NexusLearn podcast job manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/job_status_cli.py list
  python scripts/job_status_cli.py list --user <user_id> --status error
  python scripts/job_status_cli.py show <user_id> <job_id>
  python scripts/job_status_cli.py fail <user_id> <job_id> --message "Stuck job"
        """,
    )
    sub = parser.add_subparsers(dest="command")

    list_parser = sub.add_parser("list", help="List podcast jobs")
    list_parser.add_argument("--user", help="Only list jobs of this user id")
    list_parser.add_argument(
        "--status",
        choices=sorted(VALID_STATUSES),
        help="Filter jobs by status",
    )
    list_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum number of jobs to display (default: 50)",
    )
    list_parser.add_argument(
        "--all",
        action="store_true",
        help="Display all jobs (overrides --limit)",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-readable text",
    )
    list_parser.set_defaults(func=cmd_list)

    show_parser = sub.add_parser("show", help="Show a single podcast job")
    show_parser.add_argument("user_id", help="Owner user id")
    show_parser.add_argument("job_id", help="Job identifier")
    show_parser.add_argument(
        "--full", action="store_true", help="Print the whole transcript"
    )
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-readable text",
    )
    show_parser.set_defaults(func=cmd_show)

    fail_parser = sub.add_parser("fail", help="Force a stuck job into error")
    fail_parser.add_argument("user_id", help="Owner user id")
    fail_parser.add_argument("job_id", help="Job identifier")
    fail_parser.add_argument(
        "--message",
        default="Job was failed manually.",
        help="Error message stored on the job",
    )
    fail_parser.set_defaults(func=cmd_fail)

    return parser


async def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if not getattr(args, "command", None):
        parser.print_help()
        return
    await args.func(args)


if __name__ == "__main__":
    asyncio.run(main())
