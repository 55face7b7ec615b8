from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from .schema import Settings

logger = logging.getLogger(__name__)

OVERRIDES_ENV_VAR = "LESSON_ENGINE_CONFIG_OVERRIDES"

# Searched in order when no explicit path is given: the working directory,
# then the checkout the package was installed from.
DEFAULT_CONFIG_PATHS: Sequence[Path] = (
    Path("config/default.yaml"),
    Path(__file__).resolve().parents[3] / "config" / "default.yaml",
)


def find_config(config_path: str | Path | None = None) -> Optional[Path]:
    """
    Resolve the YAML file to load.

    An explicit path must exist. Without one, the first existing entry of
    `DEFAULT_CONFIG_PATHS` wins, and None means "run on built-in defaults".
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return path
    return next((path for path in DEFAULT_CONFIG_PATHS if path.exists()), None)


def read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}.")
    return data


def env_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Parse the JSON object held in `LESSON_ENGINE_CONFIG_OVERRIDES`, if set."""
    raw = (environ if environ is not None else os.environ).get(OVERRIDES_ENV_VAR)
    if not raw:
        return {}
    try:
        overrides = json.loads(raw)
    except json.JSONDecodeError as err:
        raise ValueError(f"{OVERRIDES_ENV_VAR} is not valid JSON.") from err
    if not isinstance(overrides, dict):
        raise ValueError(f"{OVERRIDES_ENV_VAR} must hold a JSON object.")
    return overrides


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge `override` into a copy of `base`; nested sections merge key by key."""
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Build validated `Settings` from the config file and environment overrides.

    Parameters
    ----------
    config_path : str | Path | None
        Explicit YAML file. When omitted, `find_config` searches the default
        locations and falls back to the schema defaults if none exists.
    environ : Mapping[str, str] | None
        Environment to read overrides from; defaults to `os.environ`.
    """
    path = find_config(config_path)
    if path is None:
        logger.debug("No config file found; using built-in defaults")
        data: Dict[str, Any] = {}
    else:
        logger.debug("Loading settings from %s", path)
        data = read_yaml(path)

    data = deep_merge(data, env_overrides(environ))
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
