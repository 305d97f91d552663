"""
Development server for FinTrack.

Runs the JSON API on Flask's built-in server. Database URL, host and
port default to the FINTRACK_* settings.
"""

import argparse

import structlog

from fintrack.api import create_app
from fintrack.config import get_settings, validate_all_settings


logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="FinTrack personal finance API.")
    parser.add_argument(
        "--database",
        help="SQLAlchemy database URL to use (defaults to FINTRACK_DB_URL).",
    )
    parser.add_argument(
        "--host",
        help="Host interface for the development server (defaults to the configured host).",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for the development server (defaults to the configured port).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable Flask debug mode.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    checks = validate_all_settings()
    failed = [name for name, ok in checks.items() if ok is False]
    if failed:
        logger.error("invalid_settings", sections=failed, details=checks)
        raise SystemExit(1)

    settings = get_settings()
    host = args.host or settings.app.host
    port = args.port or settings.app.port
    debug = settings.app.debug_mode if args.debug is None else args.debug

    app = create_app(database_url=args.database)

    logger.info("server_starting", host=host, port=port, debug=debug)
    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    main()
