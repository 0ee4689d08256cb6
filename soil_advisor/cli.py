"""CLI entry point: adquiere un snapshot y recomienda cultivos."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .catalog import DEFAULT_CATALOG
from .classification import DEFAULT_THRESHOLDS, classify_reading
from .config import LOG_LEVELS, Settings, get_settings
from .core.acquisition import SettingsError, SnapshotAcquisitionClient, TimeoutStrategy
from .core.domain import AcquisitionError, SensorReading
from .core.transport import BleakTransport
from .core.validation import decode
from .recommendation import (
    CropRuleEngine,
    RecommendationContext,
    RuleTableError,
    fertilizer_plan,
    get_rule_table,
)
from .recommendation.models import LOCALES
from .resilience import AsyncRetryExecutor, RetryConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="soil-advisor",
        description="Read one soil sensor snapshot over BLE and recommend crops",
    )
    p.add_argument("--season", choices=DEFAULT_CATALOG.season_values)
    p.add_argument("--weather", choices=DEFAULT_CATALOG.weather_values)
    p.add_argument("--timeout-ms", type=int, default=None, help="notification wait (default from settings)")
    p.add_argument("--no-fallback", action="store_true", help="fail on timeout instead of a pull read")
    p.add_argument("--retries", type=int, default=0, help="retries on recoverable acquisition errors")
    p.add_argument("--payload", help="hex of a captured 2-byte payload; skips the BLE scan")
    p.add_argument("--land-area", type=float, default=None)
    p.add_argument("--land-unit", choices=DEFAULT_CATALOG.land_unit_values, default="acre")
    p.add_argument("--locale", choices=LOCALES, default="en")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None)
    return p


async def _acquire(args: argparse.Namespace, settings: Settings) -> SensorReading:
    profile = settings.device_profile()
    if args.no_fallback:
        profile = replace(profile, timeout_strategy=TimeoutStrategy.FAIL)
    client = SnapshotAcquisitionClient(BleakTransport(), profile)

    executor = AsyncRetryExecutor(RetryConfig(max_attempts=args.retries + 1))
    return await executor.execute(client.acquire, args.timeout_ms)


def build_report(
    reading: SensorReading,
    args: argparse.Namespace,
    settings: Settings,
) -> dict:
    engine = CropRuleEngine(get_rule_table(settings.rules_file, DEFAULT_CATALOG))
    result = engine.recommend(
        reading, RecommendationContext(season=args.season, weather=args.weather),
    )

    report = {
        "reading": reading.to_dict(),
        "profile": classify_reading(reading, DEFAULT_THRESHOLDS).to_dict(),
        "recommendation": result.to_dict(),
        "crops": list(result.crops_for(args.locale)),
    }
    if args.land_area is not None:
        plan = fertilizer_plan(reading, args.land_area, args.land_unit)
        report["fertilizer"] = {
            "land_area": args.land_area,
            "land_unit": args.land_unit,
            "doses": [d.to_dict() for d in plan],
        }
    return report


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = get_settings()
    except SettingsError as e:
        _configure_logging(args.log_level or "INFO")
        logger.error("Invalid settings: %s", e)
        return 1
    _configure_logging(args.log_level or settings.log_level)

    if args.retries < 0:
        parser.error("--retries must be >= 0")
    if args.timeout_ms is not None and args.timeout_ms <= 0:
        parser.error("--timeout-ms must be positive")
    if args.land_area is not None and args.land_area <= 0:
        parser.error("--land-area must be positive")

    try:
        if args.payload is not None:
            try:
                raw = bytes.fromhex(args.payload)
            except ValueError:
                parser.error(f"--payload is not valid hex: {args.payload!r}")
            reading = decode(raw)
        else:
            reading = asyncio.run(_acquire(args, settings))
        report = build_report(reading, args, settings)
    except AcquisitionError as e:
        logger.error("Acquisition failed: %s", e)
        return 1
    except RuleTableError as e:
        logger.error("Crop rules could not be loaded: %s", e)
        return 1

    json.dump(report, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
