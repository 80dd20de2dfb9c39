"""Central logging configuration.

Applies a root stdout handler so all module loggers emit without per-module
setup. Does nothing when the root logger already has handlers, so embedding
test runners keep their own configuration.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Optional

from .config import EngineConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(config: Optional[EngineConfig] = None) -> None:
    """Configure logging once."""
    root = logging.getLogger()
    if root.handlers:
        return
    level = (config or EngineConfig()).log_level
    dictConfig(_dict_config(level))
