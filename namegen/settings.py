#!/usr/bin/env python3
"""
namegen Settings
================
Defaults for the CLI host, read from ``namegen/configs/app.yaml``.

The engines never read settings: their flags and pre-seeded tokens are
constructor arguments. Only the CLI consults this module, for option
defaults and the logging level.

Usage:
    from namegen.settings import get_setting

    count = get_setting('cli.count', 20)
    lrs = get_setting('markov.lrs', False)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any
import os

import yaml

PACKAGE_ROOT = Path(__file__).resolve().parent
CONFIG_DIR = PACKAGE_ROOT / "configs"
APP_CONFIG_PATH = CONFIG_DIR / "app.yaml"


@lru_cache(maxsize=1)
def load_app_config() -> dict:
    """Parse app.yaml once per process; an empty file yields {}."""
    if not APP_CONFIG_PATH.exists():
        raise FileNotFoundError(f"namegen config not found: {APP_CONFIG_PATH}")
    return yaml.safe_load(APP_CONFIG_PATH.read_text(encoding="utf-8")) or {}


def get_setting(path: str, default: Any = None) -> Any:
    """
    Look up a value by dotted key, e.g. ``'markov.tokens'``.

    Returns ``default`` as soon as a key is missing or a non-mapping is
    reached before the last key.
    """
    node: Any = load_app_config()
    for key in path.split('.'):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def resolve_path(value: str, base: Path | None = None) -> Path:
    """Expand ``~`` and anchor relative sample file paths at ``base`` (cwd)."""
    if value is None:
        raise ValueError("sample file path is required")
    path = Path(os.path.expanduser(str(value)))
    if path.is_absolute():
        return path
    return ((base or Path.cwd()) / path).resolve()


__all__ = [
    "load_app_config",
    "get_setting",
    "resolve_path",
    "PACKAGE_ROOT",
    "APP_CONFIG_PATH",
]
