"""Command-line entrypoint: ``python -m pump_autoswitch``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from pump_autoswitch.app import run
from pump_autoswitch.config import get_settings
from pump_autoswitch.exceptions import TransportError

logger = logging.getLogger("pump_autoswitch")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pump-autoswitch",
        description="Switch the irrigation pump whenever an OpenSprinkler station is active.",
    )
    parser.add_argument("--broker", help="MQTT broker URL, e.g. tcp://host:1883")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARN, ERROR")
    parser.add_argument("--pushover-user", help="user key for Pushover notifications")
    parser.add_argument("--pushover-token", help="API token for Pushover notifications")
    parser.add_argument(
        "--debounce", type=float, help="seconds without station activity before the pump may stop"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        settings = get_settings(
            broker=args.broker,
            log_level=args.log_level,
            pushover_user=args.pushover_user,
            pushover_token=args.pushover_token,
            debounce_seconds=args.debounce,
        )
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    logging.getLogger().setLevel(settings.log_level_value)

    try:
        asyncio.run(run(settings))
    except TransportError as exc:
        logger.critical("Cannot start: %s", exc)
        return 1
    except KeyboardInterrupt:
        pass

    logger.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
