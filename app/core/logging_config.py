# app/core/logging_config.py
import logging
import logging.config
import sys
from typing import Dict, Any
from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DETAILED_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "httpx": "WARNING",       # one line per outbound AI request
    "httpcore": "WARNING",
    "sqlalchemy": "WARNING",  # engine echo is driven by DEBUG instead
    "passlib": "ERROR",       # bcrypt version probe warning
}


def build_logging_config() -> Dict[str, Any]:
    """dictConfig for the API: console always, file only when LOG_FILE is set."""
    app_level = "DEBUG" if settings.DEBUG else "INFO"
    app_handlers = ["console"]
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": app_level,
            "formatter": "detailed" if settings.DEBUG else "default",
            "stream": sys.stdout,
        },
    }
    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": "INFO",
            "formatter": "detailed",
            "filename": settings.LOG_FILE,
            "mode": "a",
        }
        app_handlers.append("file")

    loggers: Dict[str, Any] = {
        "": {"handlers": ["console"], "level": "INFO"},
        # app.services.generation, app.client, app.main ... all inherit from here
        "app": {"handlers": app_handlers, "level": app_level, "propagate": False},
        "uvicorn": {"handlers": ["console"], "level": "INFO", "propagate": False},
    }
    for name, level in QUIET_LOGGERS.items():
        loggers[name] = {"handlers": ["console"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "detailed": {"format": DETAILED_LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": handlers,
        "loggers": loggers,
    }


def setup_logging() -> None:
    """Setup centralized logging configuration"""
    # Handler failures (e.g. broken pipe) must not interrupt request processing
    logging.raiseExceptions = False
    logging.config.dictConfig(build_logging_config())

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured for {settings.ENVIRONMENT} environment (debug={settings.DEBUG})")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(f"app.{name}")


# Initialize logging when module is imported
setup_logging()
