"""Logging configuration"""
import logging
import logging.config
from typing import Any, Dict

from infrastructure.config import Settings


class LogConfig:
    """
    Logging configuration for the server, converted to a dict for
    `logging.config.dictConfig`.

    Call `LogConfig().initialize_loggers(settings)` once at startup.
    """

    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def get_config_dict(self, settings: Settings) -> Dict[str, Any]:
        level = settings.LOG_LEVEL.upper()

        handlers: Dict[str, Any] = {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
            },
        }
        if settings.LOG_FILE:
            handlers["file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "default",
                "filename": settings.LOG_FILE,
                "maxBytes": 1024 * 1024 * 5,
                "backupCount": 5,
                "level": level,
            }

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": self.LOG_FORMAT,
                    "datefmt": "%d-%b-%y %H:%M:%S",
                },
            },
            "handlers": handlers,
            "loggers": {
                "scheduler": {
                    "handlers": list(handlers),
                    "level": level,
                    "propagate": False,
                },
            },
        }

    def initialize_loggers(self, settings: Settings) -> None:
        logging.config.dictConfig(self.get_config_dict(settings))
        logging.getLogger("scheduler").debug("Logging initialized at level %s", settings.LOG_LEVEL)
