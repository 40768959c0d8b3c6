from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Union

from tracker.config import LOG_LEVEL


def configure_logging(level: Union[int, str] = LOG_LEVEL) -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"}
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "level": level,
                }
            },
            "loggers": {
                "": {"handlers": ["console"], "level": logging.WARNING},
                "tracker": {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )
