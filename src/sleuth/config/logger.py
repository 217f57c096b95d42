from __future__ import annotations

import inspect
import logging.config
import sys
import typing
from typing import Any, override

from loguru import logger

from sleuth.config.general import CONFIG
from sleuth.types.general import LogLevel

if typing.TYPE_CHECKING:
    from loguru import Record


class InterceptHandler(logging.Handler):
    """Logger which forwards to loguru."""

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Intercept stdlib logging and send it to loguru handling."""
        # Get corresponding Loguru level if it exists.
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message.
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def format_stdout(record: Record) -> str:
    """Format a record with its origin; a `request` extra is shown when bound."""
    header = "<cyan>{time:YYYY-MM-DDTHH:mm:ss.SSSZ}</cyan> <level>{level:8}</level> "
    if "request" in record["extra"]:
        header += "<green>{extra[request]}</green> "
    return header + "{message} <cyan>{name}:{function}():{line}</cyan>\n{exception}"


def configure_logging(level: LogLevel | None = None) -> dict[str, Any]:
    """Route http client logging to loguru and give loguru a stdout sink.

    The library never calls this itself; applications opt in.
    """
    std_log_config = {
        "version": 1,
        "handlers": {
            "loguru": {
                "()": InterceptHandler,
            }
        },
        "loggers": {
            "httpx": {
                "level": "WARNING",
                "handlers": ["loguru"],
            },
            "httpcore": {
                "level": "WARNING",
                "handlers": ["loguru"],
            },
        },
        "incremental": False,
        "disable_existing_loggers": False,
    }
    logging.config.dictConfig(std_log_config)

    logger.remove()
    logger.add(
        sys.stdout,
        format=format_stdout,
        colorize=True,
        backtrace=True,
        diagnose=False,
        level=(level or CONFIG.log_level).upper(),
    )

    return std_log_config
