from __future__ import annotations

import argparse
import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Sequence

import uvicorn

from .app import (
    DEFAULT_ADMIN_RATE_LIMIT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_SETTINGS_PATH,
    ServerConfig,
    create_app,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Content preview FastAPI server")
    parser.add_argument("--host", default=DEFAULT_HOST, help="Host interface to bind to")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on")
    parser.add_argument(
        "--settings",
        type=Path,
        default=DEFAULT_SETTINGS_PATH,
        help="YAML file with webspaces, content and preview settings",
    )
    parser.add_argument("--admin-token", default=None, help="Token required for the preview endpoints")
    parser.add_argument(
        "--rate-limit",
        type=int,
        default=DEFAULT_ADMIN_RATE_LIMIT,
        help="Maximum number of preview requests per minute (0 to disable)",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Path to the server log file")
    parser.add_argument("--log-level", default="info", help="Log level for the application and uvicorn")
    return parser.parse_args(argv)


def setup_logging(level: str, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the ``portal_preview`` logger with console and optional file output."""

    logger = logging.getLogger("portal_preview")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        resolved = Path(log_file).expanduser().resolve()
        resolved.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            resolved,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    config = ServerConfig(
        host=args.host,
        port=args.port,
        settings_path=args.settings,
        admin_token=args.admin_token,
        rate_limit_per_minute=args.rate_limit,
        log_path=args.log_file,
    )
    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=args.log_level)


if __name__ == "__main__":  # pragma: no cover
    main()
