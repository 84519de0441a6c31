"""Console + optional dual-format file logging using structlog."""

import logging
import sys
from datetime import datetime

import structlog

from ..config import settings


def setup_logging(level: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Configure structlog on top of stdlib logging.

    Console output is always plain text. When ``settings.log_to_file`` is set,
    JSON and/or plain text log files are written under ``settings.log_dir``
    according to ``settings.log_format``.

    Args:
        level: Log level override (default: settings.log_level)

    Returns:
        Root bound logger
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    level_name = (level or settings.log_level).upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.handlers.clear()

    # Console goes to stderr so parse output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger.addHandler(console_handler)

    if settings.log_to_file:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        if settings.log_format in ("json", "both"):
            json_log_dir = settings.log_dir / "json"
            json_log_dir.mkdir(parents=True, exist_ok=True)
            json_handler = logging.FileHandler(
                json_log_dir / f"response2files_{timestamp}.json", encoding="utf-8"
            )
            json_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    processor=structlog.processors.JSONRenderer(),
                    foreign_pre_chain=shared_processors,
                )
            )
            root_logger.addHandler(json_handler)

        if settings.log_format in ("text", "both"):
            text_log_dir = settings.log_dir / "text"
            text_log_dir.mkdir(parents=True, exist_ok=True)
            text_handler = logging.FileHandler(
                text_log_dir / f"response2files_{timestamp}.log", encoding="utf-8"
            )
            text_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    processor=structlog.dev.ConsoleRenderer(colors=False),
                    foreign_pre_chain=shared_processors,
                )
            )
            root_logger.addHandler(text_handler)

    return structlog.get_logger()
