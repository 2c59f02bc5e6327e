"""Logging configuration for the Fleetdesk backend."""

import logging
import logging.config

from backend.fleetdesk.core.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s.%(funcName)s:%(lineno)d - %(message)s"


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            },
        },
        "loggers": {
            "backend.fleetdesk": {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
        },
    }


def configure_logging() -> None:
    settings = get_settings()
    level = settings.log_level.upper()
    if level not in logging.getLevelNamesMapping():
        level = "INFO"
    logging.config.dictConfig(build_logging_config(level))
