"""Logging configuration for the Personal Assistant Engine application.
"""

import logging
import logging.config
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG/INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai", "ollama")

def build_logging_config(log_level: str = "INFO") -> Dict[str, Any]:
    """Builds a dictConfig dictionary for the given root log level.

    The same dictionary is handed to uvicorn so server and application
    logs share one format.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False, # Keep existing loggers (e.g., uvicorn)
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": logging.INFO,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }
    for name in QUIET_LOGGERS:
        config["loggers"][name] = {
            "level": logging.WARNING,
            "handlers": ["console"],
            "propagate": False,
        }
    return config

def configure_logging(log_level: str = "INFO") -> Dict[str, Any]:
    """Applies the logging configuration and returns it."""
    config = build_logging_config(log_level)
    logging.config.dictConfig(config)
    return config
