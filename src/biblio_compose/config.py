"""Environment-driven configuration for the composer entry points."""
from __future__ import annotations

import os
import shlex
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "BIBLIO_"


class ComposerConfig(BaseModel):
    reader_format: str = Field("markdown", description="pandoc input format")
    output_format: str = Field("html", description="pandoc output format")
    artifact_root: str = Field(".", description="Directory holding styles and bibliographies")
    http_timeout: float = Field(10.0, gt=0, description="Seconds to wait for remote styles")
    http_retries: int = Field(3, ge=1)
    pandoc_extra_args: List[str] = Field(default_factory=list)

    @field_validator("reader_format", "output_format")
    @classmethod
    def strip_format(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("format must not be empty")
        return value

    @field_validator("pandoc_extra_args", mode="before")
    @classmethod
    def split_args(cls, value):
        if isinstance(value, str):
            return shlex.split(value)
        return value


def load_config(env: Optional[Mapping[str, str]] = None) -> ComposerConfig:
    """Build a config from ``BIBLIO_*`` variables (``.env`` is honoured)."""

    if env is None:
        load_dotenv()
        env = os.environ
    values = {}
    for name in ComposerConfig.model_fields:
        key = ENV_PREFIX + name.upper()
        if env.get(key) not in (None, ""):
            values[name] = env[key]
    return ComposerConfig(**values)
