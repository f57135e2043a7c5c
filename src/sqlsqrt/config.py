# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and filesystem resolution for SQLsqrt.

Handles:
- Data root resolution (SQLSQRT_DATA_HOME, ~/.local/share)
- History DB and crash log paths
- Packaged YAML defaults loading (sqlsqrt/defaults/*.yaml)
- ANSI coloring constants for the prompt, errors and table cells
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

# -----------------------
# UI constants
# -----------------------

ANSI_COLORS: dict[str, str] = {
    "cyan": "\033[38;5;69;1m",
    "pink": "\033[38;5;169;1m",
    "reset": "\033[0m",
    "red": "\033[31m",
    "bold": "\033[1m",
    "italic": "\033[3m",
}

DEFAULT_PROMPT = "SQLsqrt >"
DEFAULT_CONTINUATION_PROMPT = "SQLsqrt (cont.) >"


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("shell.page_size", 20) -> 20
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur

    def set_path(self, path: str, value: Any) -> None:
        """Override a nested value (command-line options win over YAML)."""
        parts = path.split(".")
        cur = self._config
        for part in parts[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[parts[-1]] = value


# -----------------------
# Data root + paths
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for SQLsqrt.

    Resolution order:
    1. SQLSQRT_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)
    """
    data_home = os.getenv("SQLSQRT_DATA_HOME")
    if data_home:
        root = Path(data_home)
    else:
        root = Path.home() / ".local" / "share"

    root.mkdir(parents=True, exist_ok=True)
    return root


def history_db_path(data_root: Path) -> Path:
    """<data_root>/sqlsqrt/history.db"""
    return data_root / "sqlsqrt" / "history.db"


def crash_log_path(data_root: Path) -> Path:
    """<data_root>/sqlsqrt/logs/crash.log"""
    return data_root / "sqlsqrt" / "logs" / "crash.log"


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("sqlsqrt.defaults")
    )  # type: ignore[arg-type]


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from sqlsqrt/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(
            f"Defaults YAML {filename} must load to a mapping/dict."
        )
    return data


def load_system_config() -> YAMLConfig:
    """
    Load system.yaml from packaged defaults and return a YAMLConfig wrapper.
    """
    return YAMLConfig(load_defaults_yaml("system.yaml"))
