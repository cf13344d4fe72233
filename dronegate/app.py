"""Command entry point: load the environment, open the database and run the gateway."""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from . import logger
from .db import Database
from .gateway import DEFAULT_HOST, DEFAULT_PORT, serve


def _parse_args(argv):
    parser = argparse.ArgumentParser(prog="dronegate", description="Drone telemetry gateway.")
    parser.add_argument("--env-file", default=".env", help="environment file to load")
    parser.add_argument("--config-dir", default="config", help="directory holding db.yaml")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    return parser.parse_args(argv)


def main(argv=None):
    """Start the gateway; return a non-zero status when setup fails."""
    args = _parse_args(argv)
    env_file = Path(args.env_file)
    if not env_file.is_file():
        logger.error("Error loading .env file: %s not found", env_file)
        return 1
    load_dotenv(env_file)

    try:
        database = Database.open(args.config_dir)
    except (OSError, ValueError, SQLAlchemyError) as exc:
        logger.error("Database setup failed: %s", exc)
        return 1

    with database:
        serve(args.host, args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())