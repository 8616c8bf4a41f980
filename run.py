"""
Run script for starting the call bridge server.

Settings are loaded and validated before uvicorn starts, so a missing credential
stops the process immediately instead of failing the first call.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import sys

import uvicorn

from convai_bridge.config.logging_config import configure_logging
from convai_bridge.config.settings import load_settings
from convai_bridge.exceptions import ConfigurationError
from convai_bridge.main import create_app

logger = configure_logging()


def parse_args(settings, argv=None):
    """Parse command line arguments, defaulting to the loaded settings."""
    parser = argparse.ArgumentParser(description="Start the ElevenLabs call bridge server")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to run the server on (default: PORT env var or 8000)",
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help="Host to bind the server to (default: HOST env var or 0.0.0.0)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: LOG_LEVEL env var or INFO)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point: validate configuration, then serve."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    args = parse_args(settings, argv)
    settings = settings.model_copy(
        update={"host": args.host, "port": args.port, "log_level": args.log_level}
    )

    logger.info(f"[Server] Listening on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        http="h11",
        access_log=False,
    )


if __name__ == "__main__":
    main()
