#!/usr/bin/env python3
"""CLI for computing recovery timeline values from exported records.

Usage:
    python -m cli <command> FILE [--now ISO] [--timezone TZ]

FILE is a JSON document shaped like the storage rows:
    {"profile": {"sobriety_date": "2024-01-01", "timezone": "UTC"},
     "slip_ups": [{"slip_up_date": "...", "recovery_restart_date": "...",
                   "created_at": "..."}]}

Commands:
    metrics   Print streak length, journey length and reached milestones
    timeline  Print journey timeline events, newest first
"""

import argparse
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from core import bind_contextvars, clear_contextvars, get_logger
from core.config import get_settings
from core.logger import configure_logging
from schemas import Profile, RecordsExport, SlipUp
from services.date_service import InvalidDateFormatError
from services.milestones_service import build_milestones, next_milestone
from services.sobriety_service import compute_metrics
from services.timeline_service import build_timeline
from services.timezone_service import InvalidTimezoneError

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INVALID_DATA = 2


def _parse_now(value: str | None) -> datetime:
    if value is None:
        return datetime.now(UTC)
    try:
        now = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"--now must be ISO-8601, got {value!r}"
        ) from None
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now


def _load_records(path: Path) -> tuple[Profile, list[SlipUp]]:
    document = json.loads(path.read_text(encoding="utf-8"))
    export = RecordsExport.model_validate(document)
    return export.profile or Profile(), export.slip_ups


def cmd_metrics(path: Path, now: datetime, default_timezone: str) -> int:
    """Print sobriety metrics and milestones for the records in FILE."""
    settings = get_settings()
    profile, slip_ups = _load_records(path)
    bind_contextvars(profile_id=profile.id)

    metrics = compute_metrics(profile, slip_ups, now, default_timezone)
    milestones = build_milestones(metrics, settings.milestone_days)
    upcoming = next_milestone(metrics.days_sober, settings.milestone_days)

    logger.info(
        "metrics.computed",
        days_sober=metrics.days_sober,
        journey_days=metrics.journey_days,
        state=metrics.state.value,
        timezone=metrics.timezone,
    )

    output = {
        "metrics": metrics.model_dump(mode="json"),
        "milestones": [m.model_dump(mode="json") for m in milestones],
        "next_milestone": upcoming.model_dump(mode="json") if upcoming else None,
    }
    print(json.dumps(output, indent=2))
    return EXIT_OK


def cmd_timeline(path: Path, now: datetime, default_timezone: str) -> int:
    """Print the journey timeline for the records in FILE."""
    settings = get_settings()
    profile, slip_ups = _load_records(path)
    bind_contextvars(profile_id=profile.id)

    events = build_timeline(
        profile,
        slip_ups,
        now=now,
        default_timezone=default_timezone,
        milestone_set=settings.milestone_days,
    )

    logger.info("timeline.built", events=len(events))
    print(json.dumps([e.model_dump(mode="json") for e in events], indent=2))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Recovery timeline CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("metrics", "Print streak length, journey length and milestones"),
        ("timeline", "Print journey timeline events, newest first"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file", type=Path, help="JSON export of profile + slip-ups")
        sub.add_argument("--now", help="Instant to measure up to (ISO-8601)")
        sub.add_argument(
            "--timezone",
            help="Fallback timezone for profiles without one",
        )

    args = parser.parse_args(argv)

    if args.command not in ("metrics", "timeline"):
        parser.print_help()
        return EXIT_USAGE

    configure_logging()

    try:
        now = _parse_now(args.now)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error("metrics.invalid_config", error=str(e))
        return EXIT_INVALID_DATA

    default_timezone = args.timezone or settings.default_timezone
    command = cmd_metrics if args.command == "metrics" else cmd_timeline

    try:
        return command(args.file, now, default_timezone)
    except InvalidDateFormatError as e:
        logger.error("metrics.invalid_date", value=e.value, reason=e.reason)
    except InvalidTimezoneError as e:
        logger.error("metrics.invalid_timezone", timezone=e.timezone)
    except (ValidationError, json.JSONDecodeError) as e:
        logger.error("metrics.invalid_records", error=str(e))
    except OSError as e:
        logger.error("metrics.unreadable_file", path=str(args.file), error=str(e))
    finally:
        clear_contextvars()
    return EXIT_INVALID_DATA


if __name__ == "__main__":
    sys.exit(main())
