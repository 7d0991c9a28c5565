#!/usr/bin/python3
"""
Application configuration parsing.

This module defines the configuration schema used by the search service and
the command-line front-ends, and provides a simple parser for key=value
configuration files.

Parsing rules:
- Unknown keys are ignored.
- Blank lines and comment lines starting with '#' are ignored.
- The 'csvpath' key is required.
- Values are validated (booleans, positive integers, log level names).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the configuration file is missing
    required values or invalid."""


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppConfig:
    """Parsed application configuration.

    Attributes:
        csvpath: Path to the record source (header + identifier,content rows).
        reread_on_query: If True, re-read the source on each query.
        workers: Number of threads used to search the records of one query.
        cache_max: Maximum number of per-pattern results kept in memory when
            reread_on_query=False. 0 disables result caching.
        unique_names: If True, repeated identifiers are reported once.
        escape_output: If True, results are serialized with a JSON encoder
            instead of the raw legacy form.
        log_level: Name of the logging level for the front-ends.
    """

    csvpath: Path
    reread_on_query: bool = True
    workers: int = 1
    cache_max: int = 100

    unique_names: bool = False
    escape_output: bool = False

    log_level: str = "WARNING"


def _parse_bool(value: str) -> bool:
    """Parse a boolean config value.

    Accepted truthy values: true, 1, yes, y, on.
    Accepted falsy values: false, 0, no, n, off.

    Raises:
        ConfigError: If the value cannot be interpreted as a boolean.
    """
    v = value.strip().lower()
    if v in {"true", "1", "yes", "y", "on"}:
        return True
    if v in {"false", "0", "no", "n", "off"}:
        return False
    raise ConfigError(f"Invalid boolean value: {value!r}")


def _parse_int(key: str, value: str, minimum: int) -> int:
    """Parse an integer config value with a lower bound.

    Raises:
        ConfigError: If the value is not an integer or is below minimum.
    """
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ConfigError(
            f"Invalid integer value for {key}: {value!r}"
        ) from exc

    if parsed < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {parsed}")
    return parsed


def parse_log_level(value: str) -> str:
    """Normalize and validate a logging level name.

    Raises:
        ConfigError: If the name is not a standard logging level.
    """
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(
            f"Unsupported log_level={value!r}. Allowed: {list(LOG_LEVELS)}"
        )
    return level


def load_config(config_path: str | Path) -> AppConfig:
    """Load and validate application configuration from a file.

    Supported keys:
        csvpath=/path/to/records.csv              (required)
        reread_on_query=True|False                (optional)
        workers=1                                 (optional, >= 1)
        cache_max=100                             (optional, >= 0)
        unique_names=True|False                   (optional)
        escape_output=True|False                  (optional)
        log_level=DEBUG|INFO|WARNING|ERROR        (optional)

    Args:
        config_path: Path to the configuration file.

    Returns:
        A validated AppConfig instance.

    Raises:
        ConfigError: If the file cannot be read, required keys are missing, or
            values fail validation.
    """
    path = Path(config_path)

    try:
        raw = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(
            f"Failed to read config file: {path} ({exc})"
        ) from exc

    values: dict[str, str] = {}

    for line in raw.splitlines():
        stripped = line.strip()

        if not stripped or stripped.startswith("#"):
            continue

        key, sep, value = stripped.partition("=")
        if not sep:
            continue

        values[key.strip()] = value.strip()

    if "csvpath" not in values:
        raise ConfigError("Missing required config entry: csvpath=")
    if not values["csvpath"]:
        raise ConfigError("csvpath is present but empty")

    kwargs: dict[str, object] = {"csvpath": Path(values["csvpath"])}

    for key in ("reread_on_query", "unique_names", "escape_output"):
        if key in values:
            kwargs[key] = _parse_bool(values[key])

    if "workers" in values:
        kwargs["workers"] = _parse_int("workers", values["workers"], 1)

    if "cache_max" in values:
        kwargs["cache_max"] = _parse_int(
            "cache_max", values["cache_max"], 0
        )

    if "log_level" in values:
        kwargs["log_level"] = parse_log_level(values["log_level"])

    cfg = AppConfig(**kwargs)  # type: ignore[arg-type]
    logger.debug("Loaded config from %s: %r", path, cfg)
    return cfg
