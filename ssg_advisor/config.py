"""
Layered configuration for the SSG advisor.

Sources, lowest precedence first:

  config/default.toml   committed defaults
  config/local.toml     per-machine overrides beside it (gitignored)
  .env / environment    ``SSG_ADVISOR_*`` variables, see ``_ENV_OVERRIDES``

``load_config()`` returns a frozen ``AppConfig``; the CLI and
``build_orchestrator()`` take that object rather than reading the
environment themselves.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """Knowledge graph store backend and SQLite connection settings."""

    model_config = ConfigDict(frozen=True)

    backend: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = "data/db/ssg_advisor.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000

    @field_validator("busy_timeout_ms")
    @classmethod
    def validate_busy_timeout(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"busy_timeout_ms must be non-negative, got {v}.")
        return v


class RecommendationConfig(BaseModel):
    """Scoring output and preference overlay settings."""

    model_config = ConfigDict(frozen=True)

    confidence_boost: float = 0.05
    max_alternatives: int = 4

    @field_validator("confidence_boost")
    @classmethod
    def validate_boost(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence_boost must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("max_alternatives")
    @classmethod
    def validate_max_alternatives(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_alternatives must be non-negative, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/ssg_advisor.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration, the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

ENV_PREFIX = "SSG_ADVISOR_"

# env suffix -> (section or None for top level, key, converter)
_ENV_OVERRIDES: dict[str, tuple[Optional[str], str, Callable[[str], Any]]] = {
    "DB_PATH":          ("database", "db_path", str),
    "STORE_BACKEND":    ("database", "backend", str.lower),
    "LOG_LEVEL":        ("logging", "level", str),
    "CONFIDENCE_BOOST": ("recommendation", "confidence_boost", float),
    "DEBUG":            (None, "debug", lambda v: v.lower() in ("1", "true", "yes")),
}


def _project_root() -> Path:
    """Nearest ancestor of this module holding ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build the ``AppConfig`` for this process.

    ``config_path`` defaults to ``<project_root>/config/default.toml``. A
    ``local.toml`` sitting next to it is merged on top, then ``SSG_ADVISOR_*``
    variables (from the environment or ``<project_root>/.env``) win.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If a merged value fails validation.
    """
    root = _project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` merged in, recursing into tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Overlay any set ``SSG_ADVISOR_*`` variable listed in ``_ENV_OVERRIDES``."""
    for suffix, (section, key, convert) in _ENV_OVERRIDES.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if not value:
            continue
        target = raw if section is None else raw.setdefault(section, {})
        target[key] = convert(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Validate the merged tables; ``[project].debug`` is the fallback for ``debug``."""
    project = raw.get("project", {})
    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        recommendation=RecommendationConfig(**raw.get("recommendation", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
