import logging
import logging.config
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_logging_config(level=None, log_file=None):
    level = level or os.getenv("LOG_LEVEL", "INFO")
    log_file = log_file if log_file is not None else os.getenv("LOG_FILE")

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": level,
        },
    }
    # File logging is opt-in so the monitor runs in read-only containers.
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": log_file,
            "formatter": "default",
            "level": level,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": level,
        },
    }


def setup_logging(level=None, log_file=None):
    logging.config.dictConfig(build_logging_config(level, log_file))
