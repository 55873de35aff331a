"""Logging setup for the recipe backend.

Modules log through ``logging.getLogger(__name__)``; this only installs the
handler and level for the ``src`` logger tree.
"""

from __future__ import annotations

import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | int | None = None) -> None:
    """Install a single stream handler on the ``src`` logger."""
    if level is None:
        from src.infrastructure.database import settings

        level = settings.log_level
    if isinstance(level, str):
        level = level.upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                "src": {"handlers": ["console"], "level": level, "propagate": False},
            },
        }
    )
