"""XDG config loading/saving for retry settings."""

from __future__ import annotations

import logging as py_logging
import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Literal, TextIO, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from resilientcall.backoff import RetryBoundedBackOff
from resilientcall.determiner import DETERMINERS, get_determiner
from resilientcall.executor import RetryPolicy
from resilientcall.logging import configure_logging, normalize_level

DeterminerName = Literal["default", "socket_errors", "server_errors", "rate_limit_errors"]
LogLevel = Literal["DEBUG", "INFO", "WARN", "ERROR"]

DEFAULT_CONFIG_PATH = Path("~/.config/resilientcall/config.toml").expanduser()
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF_MILLIS = 500
DEFAULT_MULTIPLIER = 2.0
DEFAULT_MAX_BACKOFF_MILLIS = 60_000
DEFAULT_DETERMINER: DeterminerName = "default"
DEFAULT_LOG_LEVEL: LogLevel = "INFO"
MAX_RETRIES_LIMIT = 100
MAX_RETRIES_ENV = "RESILIENTCALL_MAX_RETRIES"
DETERMINER_ENV = "RESILIENTCALL_DETERMINER"

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARN", "ERROR"}


class RetrySettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, le=MAX_RETRIES_LIMIT)
    initial_backoff_millis: int = Field(default=DEFAULT_INITIAL_BACKOFF_MILLIS, ge=1)
    multiplier: float = Field(default=DEFAULT_MULTIPLIER, ge=1.0)
    max_backoff_millis: int = Field(default=DEFAULT_MAX_BACKOFF_MILLIS, ge=1)
    randomization_factor: float = Field(default=0.0, ge=0.0, le=1.0)
    determiner: DeterminerName = DEFAULT_DETERMINER
    log_level: LogLevel = DEFAULT_LOG_LEVEL

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_level(value)
        return value

    @model_validator(mode="after")
    def _validate_interval_bounds(self) -> RetrySettings:
        if self.max_backoff_millis < self.initial_backoff_millis:
            raise ValueError("max_backoff_millis cannot be lower than initial_backoff_millis")
        return self

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_backoff_millis=self.initial_backoff_millis,
            multiplier=self.multiplier,
            max_backoff_millis=self.max_backoff_millis,
            randomization_factor=self.randomization_factor,
            determiner=get_determiner(self.determiner),
        )

    def configure_logging(
        self,
        stream: TextIO | None = None,
        *,
        log_file: str | Path | None = None,
    ) -> py_logging.Logger:
        return configure_logging(self.log_level, stream, log_file=log_file)


def build_backoff(settings: RetrySettings) -> RetryBoundedBackOff:
    return settings.to_policy().build_backoff()


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_env_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except ValueError:
        return None


def _sanitize(raw: dict[str, object]) -> RetrySettings:
    cfg = RetrySettings()

    max_retries = raw.get("max_retries", cfg.max_retries)
    if _is_int(max_retries) and 0 <= cast(int, max_retries) <= MAX_RETRIES_LIMIT:
        cfg.max_retries = cast(int, max_retries)
    env_retries = _parse_env_int(os.getenv(MAX_RETRIES_ENV, ""))
    if env_retries is not None and 0 <= env_retries <= MAX_RETRIES_LIMIT:
        cfg.max_retries = env_retries

    initial = raw.get("initial_backoff_millis", cfg.initial_backoff_millis)
    maximum = raw.get("max_backoff_millis", cfg.max_backoff_millis)
    if _is_int(initial) and _is_int(maximum) and 1 <= cast(int, initial) <= cast(int, maximum):
        # Bounds are applied as a pair; assigning one at a time trips the model validator.
        cfg = cfg.model_copy(
            update={"initial_backoff_millis": initial, "max_backoff_millis": maximum}
        )

    multiplier = raw.get("multiplier", cfg.multiplier)
    if _is_number(multiplier) and cast(float, multiplier) >= 1.0:
        cfg.multiplier = float(cast(float, multiplier))

    factor = raw.get("randomization_factor", cfg.randomization_factor)
    if _is_number(factor) and 0.0 <= cast(float, factor) <= 1.0:
        cfg.randomization_factor = float(cast(float, factor))

    determiner = raw.get("determiner", cfg.determiner)
    if isinstance(determiner, str) and determiner.strip().lower() in DETERMINERS:
        cfg.determiner = cast(DeterminerName, determiner.strip().lower())
    env_determiner = os.getenv(DETERMINER_ENV, "").strip().lower()
    if env_determiner in DETERMINERS:
        cfg.determiner = cast(DeterminerName, env_determiner)

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str) and normalize_level(log_level) in _VALID_LOG_LEVELS:
        cfg.log_level = cast(LogLevel, normalize_level(log_level))

    return cfg


def load_config(path: str | Path | None = None) -> RetrySettings:
    resolved = get_config_path(path)
    raw: object = {}
    if resolved.exists():
        try:
            with resolved.open("rb") as handle:
                raw = tomllib.load(handle)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError, OSError):
            raw = {}
    if not isinstance(raw, dict):
        raw = {}
    return _sanitize(cast(dict[str, object], raw))


def save_config(settings: RetrySettings, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        f"max_retries = {_toml_scalar(settings.max_retries)}",
        f"initial_backoff_millis = {_toml_scalar(settings.initial_backoff_millis)}",
        f"multiplier = {_toml_scalar(float(settings.multiplier))}",
        f"max_backoff_millis = {_toml_scalar(settings.max_backoff_millis)}",
        f"randomization_factor = {_toml_scalar(float(settings.randomization_factor))}",
        f"determiner = {_toml_scalar(settings.determiner)}",
        f"log_level = {_toml_scalar(settings.log_level)}",
    ]

    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved


def load_policy(path: str | Path | None = None) -> RetryPolicy:
    settings = load_config(path)
    settings.configure_logging()
    return settings.to_policy()
