import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, field_validator

from pagesmith.execution.gate import GateConfig
from pagesmith.generation.validator import Locale


ENV_PREFIX = "PAGESMITH_"

DEFAULT_MODEL_ID = "us.anthropic.claude-sonnet-4-20250514-v1:0"
DEFAULT_STORAGE_PATH = Path.home() / ".pagesmith" / "settings.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class PageSmithConfig(BaseModel):
    sandbox_mode: bool = True
    locale: Locale = Locale.EN
    model_id: str = DEFAULT_MODEL_ID
    throttle_seconds: float = 0
    storage_path: Path = DEFAULT_STORAGE_PATH
    log_level: int = logging.INFO

    @field_validator("log_level", mode="before")
    def convert_log_level(cls, v: int | str) -> int:
        if isinstance(v, str) and not v.isdigit():
            level = logging.getLevelName(v.upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {v}")
            return level
        return int(v)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PageSmithConfig":
        """Reads PAGESMITH_* variables, falling back to defaults for anything unset"""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        if (sandbox := env.get(f"{ENV_PREFIX}SANDBOX_MODE")) is not None:
            values["sandbox_mode"] = sandbox.strip().lower() in _TRUE_VALUES
        for field in ("locale", "model_id", "throttle_seconds", "storage_path", "log_level"):
            raw = env.get(f"{ENV_PREFIX}{field.upper()}")
            if raw:
                values[field] = raw.strip()

        return cls.model_validate(values)

    def gate_config(self) -> GateConfig:
        return GateConfig(sandbox_mode=self.sandbox_mode)
