import logging
import sys
from logging.config import dictConfig

from lumina.core.config import settings


def get_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "lumina": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "apscheduler": {"handlers": ["console"], "level": "WARNING", "propagate": False},
            "pymongo": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
    }


def setup_logging(level: str = None):
    """Configure logging once at process start (API and cron entrypoints)."""
    level = (level or settings.LOG_LEVEL).upper()
    dictConfig(get_logging_config(level))
    logging.getLogger("lumina").info("Logging configured (level=%s, env=%s)", level, settings.ENVIRONMENT)
