"""Entry point for the hall availability command-line tool."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date as date_type
from typing import Optional

import structlog

from .config import Settings
from .fetcher import RangeFetcher
from .inspection import inspect_offsets
from .organizer import format_summary, organize
from .service import AvailabilityResult, build_service
from .sheet_calendar import SheetDate, parse_day


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog + stdlib logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Show hall availability from the booking spreadsheet.")
    parser.add_argument(
        "--date",
        type=str,
        help="ISO date (YYYY-MM-DD) to look up. Defaults to today.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the sorted records and diagnostics as JSON instead of a summary.",
    )
    parser.add_argument(
        "--inspect-offsets",
        action="store_true",
        help="Print the first rows of every morning range to help choose header offsets.",
    )
    return parser.parse_args(argv)


def resolve_date(raw: Optional[str]) -> SheetDate:
    """Determine which date to look up."""
    if not raw:
        return SheetDate(date_type.today())
    target = parse_day(raw)
    if target is None:
        raise SystemExit(f"Invalid --date: {raw}")
    return target


def render_json(result: AvailabilityResult) -> str:
    payload = {
        "source": result.source,
        "records": [record.model_dump(mode="json", by_alias=True) for record in result.records],
        "diagnostics": result.diagnostics.as_dict(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


async def run(settings: Settings, target: SheetDate, *, as_json: bool) -> str:
    """Fetch availability for ``target`` and render it."""
    service = build_service(settings)
    result = await service.get_availability(target.value)
    if as_json:
        return render_json(result)
    rows = organize(result.records, service.locations)
    return format_summary(rows, degraded=result.degraded)


async def run_inspection(settings: Settings, target: SheetDate) -> str:
    service = build_service(settings)
    async with RangeFetcher(settings) as fetcher:
        previews = await inspect_offsets(fetcher, service.locations, target)
    return "\n".join(preview.describe() for preview in previews)


def cli(argv: Optional[list[str]] = None) -> int:
    """Console script entrypoint."""
    args = parse_args(argv)

    try:
        settings = Settings()
    except Exception as exc:  # pragma: no cover - startup validation
        configure_logging()
        LOGGER.exception("settings.error", error=str(exc))
        return 2

    configure_logging(getattr(logging, settings.log_level.upper(), logging.INFO))
    target = resolve_date(args.date)

    try:
        if args.inspect_offsets:
            output = asyncio.run(run_inspection(settings, target))
        else:
            output = asyncio.run(run(settings, target, as_json=args.json))
    except Exception as exc:  # pragma: no cover - top level
        LOGGER.exception("cli.failed", error=str(exc))
        return 1

    print(output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
