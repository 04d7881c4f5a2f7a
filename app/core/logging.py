import logging
import logging.config
from pathlib import Path
from app.core.config import settings

_ROTATION = {"maxBytes": 10485760, "backupCount": 5}


def build_logging_config(log_dir: str = None, level: str = None) -> dict:
    """dictConfig for the service: console plus rotating app, error and session-audit files."""
    log_dir = log_dir or settings.LOG_DIR
    level = level or settings.LOG_LEVEL
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] %(message)s"
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": "detailed",
                "filename": f"{log_dir}/app.log",
                **_ROTATION,
            },
            "error_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "ERROR",
                "formatter": "detailed",
                "filename": f"{log_dir}/error.log",
                **_ROTATION,
            },
            # Completions, focus losses and clock drift warnings
            "sessions_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": "detailed",
                "filename": f"{log_dir}/sessions.log",
                **_ROTATION,
            },
        },
        "root": {
            "level": level,
            "handlers": ["console", "file", "error_file"],
        },
        "loggers": {
            "app": {
                "level": level,
                "handlers": ["console", "file", "error_file"],
                "propagate": False,
            },
            "app.services": {
                "level": level,
                "handlers": ["console", "file", "error_file", "sessions_file"],
                "propagate": False,
            },
            "app.middleware.logging": {
                "level": "INFO",
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def configure_logging(log_dir: str = None, level: str = None):
    log_dir = log_dir or settings.LOG_DIR
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir, level))
