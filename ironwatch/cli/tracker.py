"""Command-line access to the team tracker.

Usage::

    # Print the status message for a team (same text as the chat reply)
    python -m ironwatch.cli check 4212

    # Run a fetch-merge-write cycle; --force walks every page
    python -m ironwatch.cli sync 4212 --force

    # List teams with subscribed chat receivers
    python -m ironwatch.cli teams

    # Push the latest status of every team to its receivers (for cron)
    python -m ironwatch.cli broadcast
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from ironwatch.config.settings import Settings
from ironwatch.services.team_status import format_status_message
from ironwatch.utils.errors import IronwatchError
from ironwatch.utils.logging import configure_cli_logging


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_check(services: dict[str, Any], args: argparse.Namespace) -> int:
    status = await services["status_service"].build_status(args.team_id)
    print(format_status_message(status, services["settings"].team_url(args.team_id)))
    return 0


async def _handle_sync(services: dict[str, Any], args: argparse.Namespace) -> int:
    articles = await services["team_sync"].sync(args.team_id, force=args.force)
    print(f"Team {args.team_id}: {len(articles)} article(s) cached")
    if args.verbose:
        for article in sorted(articles, key=lambda a: (a.day, a.id)):
            print(f"  day {article.day:>2}  {article.author}  {article.title}")
    return 0


async def _handle_teams(services: dict[str, Any], args: argparse.Namespace) -> int:
    team_ids = await services["store"].list_team_ids()
    if not team_ids:
        print("No teams yet.")
    for team_id in team_ids:
        print(team_id)
    return 0


async def _handle_broadcast(services: dict[str, Any], args: argparse.Namespace) -> int:
    broadcaster = services["broadcaster"]
    if broadcaster is None:
        print("Error: LINE_CHANNEL_ACCESS_TOKEN is not set.", file=sys.stderr)
        return 1
    report = await broadcaster.broadcast_all()
    print(
        f"{report.teams} team(s), {report.messages_sent} message(s) sent, "
        f"{len(report.failed_teams)} team(s) failed, {report.failed_deliveries} delivery failure(s)"
    )
    return 0 if not report.failed_teams and not report.failed_deliveries else 1


_HANDLERS = {
    "check": _handle_check,
    "sync": _handle_sync,
    "teams": _handle_teams,
    "broadcast": _handle_broadcast,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _team_id(value: str) -> str:
    if not value.isdigit() or int(value) <= 0:
        raise argparse.ArgumentTypeError(f"invalid team ID: {value!r}")
    return str(int(value))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ironwatch",
        description="Track iThome Ironman team article submissions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Print a team's per-member status")
    check.add_argument("team_id", type=_team_id)

    sync = subparsers.add_parser("sync", help="Fetch, merge and cache a team's articles")
    sync.add_argument("team_id", type=_team_id)
    sync.add_argument("--force", action="store_true", help="Walk every page, ignoring the cache")
    sync.add_argument("-v", "--verbose", action="store_true", help="List the articles")

    subparsers.add_parser("teams", help="List known team IDs")
    subparsers.add_parser("broadcast", help="Push every team's status to its receivers")
    return parser


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    from ironwatch.main import build_services

    # ironwatch.main configures server logging on import; stdout is ours.
    configure_cli_logging()

    try:
        services = build_services(settings)
    except IronwatchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        await services["store"].initialize()
        return await _HANDLERS[args.command](services, args)
    except IronwatchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await services["store"].close()
        await services["http_client"].aclose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args, Settings()))


if __name__ == "__main__":
    sys.exit(main())
