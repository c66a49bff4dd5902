"""
Logging configuration for the calendar aggregator
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog
from rich.console import Console
from rich.logging import RichHandler

from src.config import get_settings

if TYPE_CHECKING:
    from src.config.settings import Settings

LOG_FILE_NAME = "calendar.log"


def _renderer(settings: "Settings") -> structlog.types.Processor:
    if settings.log_format == "json" and not settings.is_development:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(
    settings: "Settings | None" = None, logs_dir: Path | str = "logs"
) -> None:
    """Route stdlib logging to the terminal (rich) and ``logs_dir/calendar.log``,
    and point structlog at it."""

    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    log_path = Path(logs_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        ),
        logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8"),
    ]
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )
    # aiohttp access logs are noise at INFO
    logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(settings),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return cast("structlog.stdlib.BoundLogger", structlog.get_logger(name))
