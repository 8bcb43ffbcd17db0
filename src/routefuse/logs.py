import logging
import tomllib
from logging.config import dictConfig
from typing import Any

import structlog
import structlog.types
from structlog.contextvars import merge_contextvars

from routefuse.constants import RouteFuse, routefuse_settings


def default_logging_config(level: str, json_logs: bool) -> dict[str, Any]:
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": [
                    structlog.stdlib.add_log_level,
                    structlog.stdlib.add_logger_name,
                    structlog.processors.TimeStamper(fmt="iso", utc=True),
                ],
            }
        },
        "handlers": {
            "default": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "structlog",
            }
        },
        "loggers": {
            "": {"handlers": ["default"], "level": level},
        },
    }


def load_logging_config(path: str) -> dict[str, Any]:
    """Read a `dictConfig` mapping from a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def setup_logging(settings: RouteFuse = routefuse_settings) -> None:
    """Route structlog through stdlib logging. Never called on import, hosts opt in."""
    if settings.log_config_file:
        dictConfig(load_logging_config(settings.log_config_file))
    else:
        dictConfig(default_logging_config(settings.log_level.upper(), settings.log_json))

    processors: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.getLogger(__name__).debug("Logging configured")
