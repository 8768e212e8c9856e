"""Launcher for the Commute Impact Calculator.

Sub-commands:
    serve   Start the HTTP API with uvicorn
    seed    Load the vehicle reference CSV into the database
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from commute_impact.adapters.storage import SQLStorage, seed_vehicle_classes
from commute_impact.adapters.vehicles import CSVVehicleRepository
from commute_impact.config import get_config
from commute_impact.domain.errors import CommuteImpactError
from commute_impact.logging_setup import configure_logging

logger = logging.getLogger("commute_impact.start")


def serve(host: Optional[str], port: Optional[int]) -> None:
    import uvicorn

    from commute_impact.api import create_app

    config = get_config()
    uvicorn.run(
        create_app(),
        host=host or config.api.host,
        port=port or config.api.port,
        log_config=None,
    )


def seed() -> int:
    config = get_config()
    vehicles = CSVVehicleRepository(config.data).list_all()
    count = seed_vehicle_classes(SQLStorage(config.storage), vehicles)
    logger.info("Vehicle classes seeded", extra={"rows": count})
    return count


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Commute Impact Calculator")
    commands = parser.add_subparsers(dest="command", required=True)

    serve_parser = commands.add_parser("serve", help="run the HTTP API")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    commands.add_parser("seed", help="load vehicle classes into the database")

    args = parser.parse_args(argv)
    configure_logging()

    try:
        if args.command == "serve":
            serve(args.host, args.port)
        else:
            count = seed()
            print(f"Seeded {count} vehicle classes")
    except CommuteImpactError as e:
        logger.error("Command failed", extra={"command": args.command})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
