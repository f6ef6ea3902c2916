"""
Status Page API - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line entry point for the incident API server.

- Provides argparse-based CLI
- Loads configuration from CLI and environment
- Configures logging
- Runs the app factory under uvicorn

============================================================
USAGE
============================================================
statuspage-api
statuspage-api --host 0.0.0.0 --port 8080 --log-format json
statuspage-api --init-db
python -m api.cli --reload

============================================================
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from core.config import Settings
from core.exceptions import StatusPageException

logger = logging.getLogger(__name__)


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    """
    Set up process-wide logging.

    Args:
        level: Log level name
        log_format: Output format (json or text)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="statuspage-api",
        description="Status page incident API server",
    )

    server_group = parser.add_argument_group("Server Options")
    server_group.add_argument("--host", type=str, help="Bind address (env: API_HOST)")
    server_group.add_argument("--port", type=int, help="Bind port (env: API_PORT)")
    server_group.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )

    logging_group = parser.add_argument_group("Logging Options")
    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (env: LOG_LEVEL)",
    )
    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=["text", "json"],
        help="Log output format (env: LOG_FORMAT)",
    )

    db_group = parser.add_argument_group("Database Options")
    db_group.add_argument(
        "--init-db",
        action="store_true",
        help="Create the incident tables and exit",
    )

    return parser


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Overlay command-line options on settings."""
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    if args.log_level:
        settings.log_level = args.log_level
    if args.log_format:
        settings.log_format = args.log_format
    return settings


# ============================================================
# MAIN
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Run the incident API server."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = apply_args(Settings.from_env(), args)
    except StatusPageException as e:
        print(f"Configuration error: {e.to_log_format()}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level, settings.log_format)

    if args.init_db:
        from database.engine import create_database_engine, initialize_database

        initialize_database(create_database_engine(settings.database_url))
        logger.info("Incident tables initialized")
        return 0

    logger.info(f"Starting incident API on {settings.host}:{settings.port}")

    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
