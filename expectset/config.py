"""
Engine configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, field_validator

from .dispatch import DEFAULT_MAX_CLOSEST


class EngineConfig(BaseModel):
    max_closest_matches: int = Field(default=DEFAULT_MAX_CLOSEST, ge=1)
    report_indent: str = "  "
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


def load_config(path: Union[str, Path]) -> EngineConfig:
    data = yaml.safe_load(Path(path).read_text()) or {}
    return EngineConfig(**data)
