"""
Logging configuration for NexusLearn (configs).

Application code logs through loguru. Records from stdlib loggers (uvicorn,
fastapi, sqlalchemy, httpx) are forwarded into loguru so the API and worker
processes each write one stream, plus an optional rotating file per component.
"""

import logging
import logging.config
import os
import sys
from typing import Any

from loguru import logger as loguru_logger

from nexuslearn.configs.config import config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "{extra[component]} | <cyan>{name}</cyan>:<cyan>{line}</cyan> - {message}"
)
FORWARDED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy",
    "httpx",
)


class InterceptHandler(logging.Handler):
    """Hand stdlib log records to loguru, keeping level and caller."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _stdlib_config(log_level: str) -> dict[str, Any]:
    # sqlalchemy echoes every statement at INFO
    quiet = {"sqlalchemy", "httpx"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {"loguru": {"()": InterceptHandler, "level": 0}},
        "loggers": {
            name: {
                "level": "WARNING" if name in quiet else log_level,
                "handlers": ["loguru"],
                "propagate": False,
            }
            for name in FORWARDED_LOGGERS
        },
        "root": {"level": log_level, "handlers": ["loguru"]},
    }


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    enable_file_logging: bool = False,
    log_dir: str | None = None,
    component: str = "default",
) -> None:
    """Configure loguru sinks for ``component`` (``api`` or ``worker``)."""
    log_level = (log_level or config.log_level).upper()
    log_dir = log_dir or config.log_dir

    loguru_logger.remove()
    loguru_logger.configure(extra={"component": component})
    loguru_logger.add(sys.stdout, level=log_level, format=LOG_FORMAT)

    if enable_file_logging:
        os.makedirs(log_dir, exist_ok=True)
        loguru_logger.add(
            os.path.join(log_dir, log_file or f"{component}.log"),
            level="DEBUG",
            format=LOG_FORMAT,
            rotation="10 MB",
            retention=5,
            backtrace=False,
            diagnose=False,
        )

    logging.config.dictConfig(_stdlib_config(log_level))
    loguru_logger.debug(f"Logging configured for {component} at {log_level}")
