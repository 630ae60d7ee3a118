"""Command line entry point: request, list, delete and purge schedules.

Usage:
    python -m hedera request --start 2024-01-01T00:00:00Z --interval PT15M \\
        --values 100,200 --direction import
    python -m hedera list
    python -m hedera delete 3f1c...
    python -m hedera purge
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from datetime import datetime

from hedera.config import HederaConfig
from hedera.errors import HederaError
from hedera.models.schedule import (
    Direction,
    MinimalSchedule,
    RemoteSchedule,
    ScheduleInterval,
    ScheduleStatus,
)
from hedera.orchestration.lifecycle import ScheduleOrchestrator
from hedera.transport.schedule_client import ScheduleClient

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_schedule(schedule: RemoteSchedule) -> str:
    """Accepted schedule → one line."""
    values = ", ".join(f"{v:g}" for v in schedule.values)
    return (
        f"[{schedule.status.value}] mRID={schedule.mrid} "
        f"| values ({schedule.quantity}): [{values}]"
    )


def format_listing(schedules: list[MinimalSchedule]) -> str:
    if not schedules:
        return "No schedules at HEDERA."
    lines = [f"{len(schedules)} schedule(s) at HEDERA:"]
    lines.extend(f"  {s}" for s in schedules)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_start(text: str) -> datetime:
    moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        raise argparse.ArgumentTypeError(f"start must carry a UTC offset: {text!r}")
    return moment


def _parse_values(text: str) -> list[float]:
    try:
        return [float(v) for v in text.split(",") if v.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid values {text!r}: {exc}") from exc


def _parse_interval(text: str) -> ScheduleInterval:
    try:
        return ScheduleInterval.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_direction(text: str) -> Direction:
    try:
        return Direction.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"direction must be import or export: {text!r}") from exc


def _parse_status(text: str) -> ScheduleStatus:
    wanted = text.strip().lower()
    for status in ScheduleStatus:
        if status.value.lower() == wanted:
            return status
    choices = ", ".join(s.value for s in ScheduleStatus)
    raise argparse.ArgumentTypeError(f"status must be one of {choices}: {text!r}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="hedera",
        description="Request capacity schedules from HEDERA",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False,
        help="Debug logging (prints the bearer token)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    req = sub.add_parser("request", help="Request a schedule and await HEDERA's verdict")
    req.add_argument("--start", type=_parse_start, required=True,
                     help="Start instant, ISO-8601 with offset")
    req.add_argument("--interval", type=_parse_interval, default=ScheduleInterval.PT15M,
                     help="Resolution (PT5M, PT15M, PT30M, PT60M; default: PT15M)")
    req.add_argument("--values", type=_parse_values, required=True,
                     help="Comma-separated values in W, one per interval")
    req.add_argument("--direction", type=_parse_direction, default=Direction.IMPORT,
                     help="import or export (default: import)")
    req.add_argument("--deadline", type=float, default=None,
                     help="Seconds to wait for a verdict (default: HEDERA_DEADLINE or 300)")

    sub.add_parser("list", help="List all existing schedules")

    dele = sub.add_parser("delete", help="Delete one schedule")
    dele.add_argument("mrid", type=uuid.UUID, help="Schedule mRID")

    purge = sub.add_parser("purge", help="Delete orphaned schedules")
    purge.add_argument(
        "--status", action="append", type=_parse_status, default=None,
        help="Status to purge (repeatable; default: Pending and Unknown)",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def run_command(args: argparse.Namespace, config: HederaConfig) -> str:
    """Log in, run one command, return the text to print."""
    async with await ScheduleClient.login(config) as client:
        orchestrator = ScheduleOrchestrator(client, config)

        if args.command == "request":
            schedule = await orchestrator.request_and_await(
                start=args.start,
                interval=args.interval,
                values=args.values,
                direction=args.direction,
                deadline=args.deadline,
            )
            return format_schedule(schedule)

        if args.command == "list":
            return format_listing(await client.list_all())

        if args.command == "delete":
            await client.delete(args.mrid)
            return f"Deleted schedule {args.mrid}"

        if args.command == "purge":
            statuses = args.status or (ScheduleStatus.PENDING, ScheduleStatus.UNKNOWN)
            count = await orchestrator.purge(statuses)
            return f"Purged {count} schedule(s)"

    raise ValueError(f"Unknown command {args.command!r}")


def cli_main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = HederaConfig.from_env()
    if not config.has_credentials:
        print("HEDERA_CLIENT_ID and HEDERA_CLIENT_SECRET must be set", file=sys.stderr)
        return 2

    try:
        print(asyncio.run(run_command(args, config)))
    except HederaError as exc:
        logger.error("%s", exc)
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli_main())
