#!/usr/bin/python3
"""
Configuration parsing tests.

These tests validate that load_config():
- Parses required keys from noisy config files.
- Applies defaults correctly.
- Rejects missing/empty required values.
- Validates booleans, integers and log level names.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from config import AppConfig, ConfigError, load_config


def _write(tmp_path: Path, *lines: str) -> Path:
    cfg = tmp_path / "app.conf"
    cfg.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return cfg


def test_load_config_parses_csvpath_among_noise(tmp_path: Path) -> None:
    """Ensure csvpath is parsed even when surrounded by irrelevant keys."""
    cfg = _write(
        tmp_path,
        "# comment line",
        "something=else",
        "not a key value line",
        "csvpath=/tmp/records.csv",
        "another=ignored",
    )

    parsed = load_config(cfg)
    assert isinstance(parsed, AppConfig)
    assert parsed.csvpath == Path("/tmp/records.csv")


def test_load_config_missing_csvpath_raises(tmp_path: Path) -> None:
    """Ensure missing csvpath triggers a ConfigError."""
    cfg = _write(tmp_path, "foo=bar", "baz=qux")

    with pytest.raises(ConfigError, match=r"csvpath="):
        load_config(cfg)


def test_load_config_empty_csvpath_raises(tmp_path: Path) -> None:
    """Ensure an empty csvpath value triggers a ConfigError."""
    cfg = _write(tmp_path, "csvpath=")

    with pytest.raises(ConfigError, match="empty"):
        load_config(cfg)


def test_load_config_file_not_found_raises(tmp_path: Path) -> None:
    """Ensure missing config files raise ConfigError with a clear message."""
    cfg = tmp_path / "missing.conf"

    with pytest.raises(ConfigError, match="not found"):
        load_config(cfg)


def test_load_config_defaults(tmp_path: Path) -> None:
    """Ensure defaults are applied when optional keys are absent."""
    cfg = _write(tmp_path, "csvpath=/tmp/records.csv")

    parsed = load_config(cfg)
    assert parsed == AppConfig(csvpath=Path("/tmp/records.csv"))
    assert parsed.reread_on_query is True
    assert parsed.workers == 1
    assert parsed.cache_max == 100
    assert parsed.unique_names is False
    assert parsed.escape_output is False
    assert parsed.log_level == "WARNING"


def test_load_config_parses_all_keys(tmp_path: Path) -> None:
    cfg = _write(
        tmp_path,
        "csvpath = /data/records.csv",
        "reread_on_query=False",
        "workers=4",
        "cache_max=0",
        "unique_names=yes",
        "escape_output=on",
        "log_level=debug",
    )

    parsed = load_config(cfg)
    assert parsed.csvpath == Path("/data/records.csv")
    assert parsed.reread_on_query is False
    assert parsed.workers == 4
    assert parsed.cache_max == 0
    assert parsed.unique_names is True
    assert parsed.escape_output is True
    assert parsed.log_level == "DEBUG"


def test_load_config_invalid_bool_raises(tmp_path: Path) -> None:
    """Ensure invalid boolean values raise ConfigError."""
    cfg = _write(tmp_path, "csvpath=/tmp/records.csv", "reread_on_query=maybe")

    with pytest.raises(ConfigError, match="Invalid boolean"):
        load_config(cfg)


@pytest.mark.parametrize(
    "line, message",
    [
        ("workers=0", "workers must be >= 1"),
        ("workers=many", "Invalid integer"),
        ("cache_max=-1", "cache_max must be >= 0"),
    ],
)
def test_load_config_invalid_int_raises(
    tmp_path: Path, line: str, message: str
) -> None:
    cfg = _write(tmp_path, "csvpath=/tmp/records.csv", line)

    with pytest.raises(ConfigError, match=message):
        load_config(cfg)


def test_load_config_unsupported_log_level_raises(tmp_path: Path) -> None:
    cfg = _write(tmp_path, "csvpath=/tmp/records.csv", "log_level=chatty")

    with pytest.raises(ConfigError, match="Unsupported log_level"):
        load_config(cfg)
