"""
Config system - layered configuration for the generator and executor.

Merge precedence (later overrides earlier):
    defaults < codefirst.yaml < .env file < environment variables < overrides

Environment keys use the ``CODEFIRST_`` prefix:
    CODEFIRST_DATABASE_URL=sqlite:///app.db
    CODEFIRST_MIGRATIONS_PATH=db/migrations
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault
from .migration import MIGRATION_VERSION

logger = logging.getLogger("codefirst.config")

__all__ = ["CodeFirstConfig", "ConfigLoader"]


@dataclass
class CodeFirstConfig:
    """Resolved configuration."""

    database_url: str = "sqlite:///db.sqlite3"
    models_path: str = "models"
    migrations_path: str = "migrations"
    migration_version: str = MIGRATION_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Unknown keys are ignored; every known key must resolve to a string.
    """

    def __init__(self, env_prefix: str = "CODEFIRST_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        path: Optional[str] = "codefirst.yaml",
        *,
        env_file: Optional[str] = ".env",
        env_prefix: str = "CODEFIRST_",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> CodeFirstConfig:
        loader = cls(env_prefix=env_prefix)

        if path:
            loader._load_yaml_file(Path(path))
        if env_file:
            loader._load_env_file(Path(env_file))
        loader._load_from_env()
        if overrides:
            loader.config_data.update({k: v for k, v in overrides.items() if v is not None})

        return loader.build()

    def _load_yaml_file(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigInvalidFault(str(path), f"not valid YAML: {exc}") from exc

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), "top level must be a mapping")
        logger.debug(f"Loaded config file {path}")
        self.config_data.update(data)

    def _load_env_file(self, path: Path) -> None:
        if not path.exists():
            return
        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self.config_data[key[len(self.env_prefix):].lower()] = value

    def _load_from_env(self) -> None:
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self.config_data[key[len(self.env_prefix):].lower()] = value

    def build(self) -> CodeFirstConfig:
        known = {f.name for f in fields(CodeFirstConfig)}
        values: Dict[str, Any] = {}
        for key, value in self.config_data.items():
            if key not in known:
                continue
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                # YAML reads `migration_version: 1.0` as a float
                value = str(value)
            if not isinstance(value, str):
                raise ConfigInvalidFault(key, f"expected a string, got {type(value).__name__}")
            values[key] = value
        return CodeFirstConfig(**values)
