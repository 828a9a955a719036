"""CLI: fetch a CWA township forecast, journal it, and print a summary table."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from typing import Any

from rich.console import Console
from rich.table import Table

from .config import load_settings
from .exceptions import ConfigError, ForecastError, JournalError
from .forecast.models import ForecastResult
from .journal import JournalWriter
from .log_setup import setup_logger
from .service import ForecastService, build_resolver


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse forecast CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch a one-week township forecast from the CWA open-data service."
    )
    parser.add_argument(
        "city",
        nargs="?",
        default=None,
        help="City/county name, e.g. 臺北市. Defaults to FORECAST_DEFAULT_CITY.",
    )
    parser.add_argument(
        "--max-print",
        type=int,
        default=None,
        help="Number of forecast periods to print.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the normalized result as JSON instead of a table.",
    )
    parser.add_argument(
        "--list-regions",
        action="store_true",
        help="List supported cities and exit.",
    )
    return parser.parse_args(argv)


def _print_result(console: Console, result: ForecastResult, max_print: int) -> None:
    console.print(
        f"City={result.city} district={result.district} periods={len(result.forecasts)}"
    )
    if not result.forecasts:
        console.print("No forecast periods found.")
        return

    table = Table(title=f"{result.city} {result.district} Forecast")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Weather", overflow="fold")
    table.add_column("Temp °C")
    table.add_column("Rain %")
    table.add_column("RH %")
    table.add_column("Wind m/s")
    table.add_column("Beaufort")

    for record in result.forecasts[:max_print]:
        table.add_row(
            record.start_time,
            record.end_time or "-",
            record.weather,
            record.temp,
            record.rain,
            record.humid,
            record.wind_speed,
            record.wind_scale,
        )
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Run the forecast fetch flow."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()
    session_id = uuid.uuid4().hex[:12]
    journal: JournalWriter | None = None

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    if args.list_regions:
        for city in build_resolver(settings, logger).supported_regions():
            console.print(city)
        return 0

    try:
        journal = JournalWriter(
            journal_dir=settings.journal_dir,
            raw_payload_dir=settings.raw_payload_dir,
            session_id=session_id,
        )
        journal.write_event(
            event_type="forecast_startup",
            payload=settings.safe_summary(),
            metadata={"session_id": session_id},
        )
    except JournalError as exc:
        logger.error("Failed to initialize forecast journal: %s", exc)
        return 3

    exit_code = 0
    try:
        journal.write_event(
            "forecast_request_start",
            payload={"city": args.city or settings.forecast_default_city},
            metadata={"session_id": session_id},
        )

        with ForecastService(settings=settings, logger=logger) as service:
            fetched = service.fetch(args.city)

        if settings.forecast_journal_raw_payloads:
            raw_path = journal.write_raw_snapshot(
                f"cwa_{fetched.region.dataset_id}", fetched.raw_payload
            )
            journal.write_event(
                "forecast_raw_snapshot",
                payload={"path": str(raw_path)},
                metadata={"session_id": session_id},
            )

        journal.write_event(
            "forecast_normalized",
            payload={
                "region": fetched.region.model_dump(mode="json"),
                "period_count": len(fetched.result.forecasts),
            },
            metadata={"session_id": session_id},
        )

        if args.json:
            console.print_json(json.dumps(fetched.result.to_payload(), ensure_ascii=False))
        else:
            max_print = args.max_print or settings.forecast_max_print
            _print_result(console, fetched.result, max_print=max_print)
    except ConfigError as exc:
        exit_code = 2
        logger.error("Configuration failure: %s", exc)
    except (ForecastError, JournalError) as exc:
        exit_code = 4
        logger.error("Forecast failure: %s", exc)
        try:
            payload: dict[str, Any] = {"error": str(exc)}
            if isinstance(exc, ForecastError):
                payload.update({"kind": exc.kind, "details": exc.details})
            journal.write_event(
                "forecast_request_failure",
                payload=payload,
                metadata={"session_id": session_id},
            )
        except JournalError:
            logger.error("Failed to write forecast_request_failure event.")
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        exit_code = 99
        logger.exception("Unexpected forecast CLI failure: %s", exc)
        try:
            journal.write_event(
                "forecast_request_failure_unhandled",
                payload={"error": str(exc), "type": type(exc).__name__},
                metadata={"session_id": session_id},
            )
        except JournalError:
            logger.error("Failed to write forecast_request_failure_unhandled event.")
    finally:
        if journal is not None:
            try:
                journal.write_event(
                    "forecast_shutdown",
                    payload={"exit_code": exit_code},
                    metadata={"session_id": session_id},
                )
            except JournalError:
                logger.error("Failed to write forecast_shutdown event.")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
