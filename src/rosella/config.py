"""XDG config loading."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from rosella.errors import ExitCode, RosellaError
from rosella.logging import LOG_LEVELS, normalize_level

DEFAULT_CONFIG_PATH = Path("~/.config/rosella/config.toml").expanduser()
DEFAULT_PATTERN_SEARCH_KEY = ":"
DEFAULT_SELECTION_POLICY: Literal["position", "identity"] = "position"
DEFAULT_GIT_TIMEOUT_SECONDS = 120.0
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVEL_ENV = "ROSELLA_LOG_LEVEL"

_VALID_SELECTION_POLICIES = {"position", "identity"}
# Keys the normal mode already binds; the pattern search key must not shadow them.
_RESERVED_KEYS = set("/hqjknumprf123456")


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    pattern_search_key: str = DEFAULT_PATTERN_SEARCH_KEY
    selection_policy: Literal["position", "identity"] = DEFAULT_SELECTION_POLICY
    git_timeout_seconds: float = Field(default=DEFAULT_GIT_TIMEOUT_SECONDS, gt=0, le=3600)
    log_level: str = DEFAULT_LOG_LEVEL
    fetch_prune: bool = True

    @field_validator("pattern_search_key")
    @classmethod
    def _validate_pattern_key(cls, value: str) -> str:
        if len(value) != 1 or not value.isprintable() or value.isspace():
            raise ValueError(f"Invalid pattern search key: {value!r}")
        if value in _RESERVED_KEYS:
            raise ValueError(f"Pattern search key is already bound: {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = normalize_level(value)
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return normalized


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    pattern_key = raw.get("pattern_search_key", cfg.pattern_search_key)
    if isinstance(pattern_key, str):
        try:
            cfg.pattern_search_key = pattern_key
        except ValueError:
            pass

    selection_policy = raw.get("selection_policy", cfg.selection_policy)
    if isinstance(selection_policy, str) and selection_policy in _VALID_SELECTION_POLICIES:
        cfg.selection_policy = cast(Literal["position", "identity"], selection_policy)

    timeout = raw.get("git_timeout_seconds", cfg.git_timeout_seconds)
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and 0 < timeout <= 3600:
        cfg.git_timeout_seconds = float(timeout)

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str) and normalize_level(log_level) in LOG_LEVELS:
        cfg.log_level = log_level
    env_level = os.getenv(LOG_LEVEL_ENV, "").strip()
    if env_level and normalize_level(env_level) in LOG_LEVELS:
        cfg.log_level = env_level

    fetch_prune = raw.get("fetch_prune", cfg.fetch_prune)
    if isinstance(fetch_prune, bool):
        cfg.fetch_prune = fetch_prune

    return cfg


def load_config(path: str | Path | None = None, *, strict: bool = False) -> AppConfig:
    """Load and sanitize the config file.

    A missing or unreadable file yields the defaults unless ``strict`` is set,
    in which case it raises ``RosellaError`` with ``CONFIG_ERROR``.
    """
    resolved = get_config_path(path)
    if not resolved.exists():
        if strict:
            raise RosellaError(
                f"Config file not found: {resolved}",
                code=ExitCode.CONFIG_ERROR,
                hint="Check the --config path.",
            )
        return _sanitize({})
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        if strict:
            raise RosellaError(
                f"Unable to read config file {resolved}: {exc}",
                code=ExitCode.CONFIG_ERROR,
                hint="Fix the TOML syntax or file permissions.",
            ) from exc
        return _sanitize({})
    if not isinstance(raw, dict):
        return _sanitize({})
    return _sanitize(raw)
