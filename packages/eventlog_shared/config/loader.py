"""Layered configuration loading for event-log processes.

Layers, highest precedence first:

1. explicit parameters (``cli_params``)
2. ``EVENTLOG_``-prefixed environment variables, ``__`` separating nested
   keys (``EVENTLOG_COMPONENTS__SERVICE__EVENT_LOG__DURABILITY=independent``)
3. ``~/.config/eventlog/eventlog.yaml``
4. ``BUILTIN_DEFAULTS``

Mappings merge key by key; any other value replaces the lower layer wholesale.
"""

from __future__ import annotations

import copy
import json
import os
from functools import reduce
from pathlib import Path
from typing import Any, Mapping

import yaml

from .defaults import BUILTIN_DEFAULTS
from .models import DEFAULT_CONFIG_PATH, ENV_PREFIX, RuntimeSettings

_TRUE_FALSE = {"true": True, "false": False}
_NULLS = {"null", "none"}


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> RuntimeSettings:
    """Resolve typed runtime settings.

    Passing ``environ`` and ``config_path`` explicitly makes the result
    independent of the process environment and home directory.
    """
    return RuntimeSettings.model_validate(
        load_config(cli_params=cli_params, environ=environ, config_path=config_path)
    )


def load_config(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    defaults: Mapping[str, Any] | None = None,
    env_prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Return the merged configuration mapping before model validation."""
    layers = (
        BUILTIN_DEFAULTS if defaults is None else defaults,
        _read_yaml(Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH),
        _read_environ(os.environ if environ is None else environ, prefix=env_prefix),
        cli_params or {},
    )
    return reduce(_deep_merge, layers, {})


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        document = yaml.safe_load(handle)
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"Config file must contain a top-level mapping: {path}")
    return document


def _read_environ(environ: Mapping[str, str], *, prefix: str) -> dict[str, Any]:
    tree: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(prefix):
            continue
        keys = [part.strip().lower() for part in name[len(prefix) :].split("__")]
        keys = [key for key in keys if key]
        if not keys:
            continue
        node = tree
        for key in keys[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = node[key] = {}
            node = child
        node[keys[-1]] = _parse_env_value(raw)
    return tree


def _deep_merge(lower: Mapping[str, Any], upper: Mapping[str, Any]) -> dict[str, Any]:
    merged = {str(key): copy.deepcopy(value) for key, value in lower.items()}
    for key, value in upper.items():
        current = merged.get(str(key))
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[str(key)] = _deep_merge(current, value)
        elif isinstance(value, Mapping):
            merged[str(key)] = _deep_merge({}, value)
        else:
            merged[str(key)] = copy.deepcopy(value)
    return merged


def _parse_env_value(raw: str) -> Any:
    """Turn an environment string into a bool, null, JSON, number or string."""
    text = raw.strip()
    lowered = text.lower()
    if lowered in _TRUE_FALSE:
        return _TRUE_FALSE[lowered]
    if lowered in _NULLS:
        return None
    if text[:1] in ("{", "["):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return raw
    for number in (int, float):
        try:
            return number(text)
        except ValueError:
            continue
    return raw
