# -*- coding: utf-8 -*-
"""User configuration file support for kettle.

Loads settings from ``~/.config/kettle/config.yaml`` (or
``$XDG_CONFIG_HOME/kettle/config.yaml`` when that variable is set).
The ``integrator`` section supplies defaults for
:class:`kettle.integration.IntegratorOptions`, e.g.::

    integrator:
      method: RK45
      rtol: 1.0e-8
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigurationError


def _config_path() -> Path:
    """Return the path to the user config file."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "kettle" / "config.yaml"


_config_cache: Optional[dict] = None


def load_config() -> dict:
    """Load and cache the user config.  Returns ``{}`` if file is missing."""
    global _config_cache
    if _config_cache is None:
        path = _config_path()
        if path.is_file():
            with open(path, "r", encoding="utf-8") as f:
                _config_cache = yaml.safe_load(f) or {}
            if not isinstance(_config_cache, dict):
                found = type(_config_cache).__name__
                _config_cache = None
                raise ConfigurationError(f"{path} must contain a mapping, found {found}")
        else:
            _config_cache = {}
    return _config_cache


def reset_config() -> None:
    """Forget the cached config so the next lookup reads the file again."""
    global _config_cache
    _config_cache = None


def get_config(key: str, default: Any = None) -> Any:
    """Dotted-key lookup into the config dict.

    Example::

        get_config("integrator.rtol")
    """
    obj: Any = load_config()
    for part in key.split("."):
        if isinstance(obj, dict):
            obj = obj.get(part)
        else:
            return default
    return obj if obj is not None else default
