import logging
import logging.config
import os

from ticketing.constant_file import log_dir, log_level

_configured = False


def configure_logging():
    """Console logging always; error.log and combined.log when LOG_DIR is set."""
    global _configured
    if _configured:
        return

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    }
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["error_file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, "error.log"),
            "formatter": "timestamped",
            "level": "ERROR",
        }
        handlers["combined_file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, "combined.log"),
            "formatter": "timestamped",
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {"format": "%(levelname)s %(name)s: %(message)s"},
            "timestamped": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
        },
        "handlers": handlers,
        "loggers": {
            "ticketing": {
                "handlers": list(handlers),
                "level": log_level,
                "propagate": True,
            },
        },
    })
    _configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
