"""Loader configuration: YAML file, then environment, then CLI overrides."""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from registry_loader.errors import ConfigError

ENV_DB_PATH = "REGISTRY_LOADER_DB"
ENV_BATCH_SIZE = "REGISTRY_LOADER_BATCH_SIZE"
ENV_LOG_LEVEL = "REGISTRY_LOADER_LOG_LEVEL"

DEFAULT_BATCH_SIZE = 25


class LoaderConfig(BaseModel):
    """Connection and tuning parameters for one load run."""

    db_path: Path = Field(default=Path("registry.db"), description="SQLite database file")
    busy_timeout: float = Field(default=5.0, gt=0, description="Seconds to wait on a locked database")
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, description="Rows per transaction")
    progress_every: int = Field(default=25, ge=1, description="Log a progress line every N inserts")
    log_level: str = "INFO"
    top_n: int = Field(default=5, ge=1)
    group_by: str = "provider_name"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LoaderConfig":
        """Load config from YAML. Supports nested (store/loader/report) or flat structure."""
        try:
            data = yaml.safe_load(Path(path).read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

        store = data.get("store", {}) or {}
        loader = data.get("loader", {}) or {}
        report = data.get("report", {}) or {}

        def _get(key: str, nested: dict, default=None):
            return nested.get(key, data.get(key, default))

        flat: dict[str, Any] = {}
        for key, section in (
            ("db_path", store),
            ("busy_timeout", store),
            ("batch_size", loader),
            ("progress_every", loader),
            ("log_level", loader),
            ("top_n", report),
            ("group_by", report),
        ):
            value = _get(key, section)
            if value is not None:
                flat[key] = value
        return cls.build(flat)

    @classmethod
    def build(cls, values: dict[str, Any]) -> "LoaderConfig":
        """Validate values, raising ConfigError instead of ValidationError."""
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid loader configuration: {e}") from e

    def with_env(self, environ: Optional[dict[str, str]] = None) -> "LoaderConfig":
        """Return a copy with REGISTRY_LOADER_* environment overrides applied."""
        env = os.environ if environ is None else environ
        updates: dict[str, Any] = {}
        if env.get(ENV_DB_PATH):
            updates["db_path"] = env[ENV_DB_PATH]
        if env.get(ENV_BATCH_SIZE):
            updates["batch_size"] = env[ENV_BATCH_SIZE]
        if env.get(ENV_LOG_LEVEL):
            updates["log_level"] = env[ENV_LOG_LEVEL]
        return self.with_overrides(**updates)

    def with_overrides(self, **overrides: Any) -> "LoaderConfig":
        """Return a copy with non-None overrides applied and re-validated."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return self.build({**self.model_dump(), **updates})
