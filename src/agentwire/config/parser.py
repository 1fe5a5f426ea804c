"""Load, validate, and resolve agentwire.yaml configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from agentwire.config.models import AgentwireConfig
from agentwire.errors import ConfigError

DEFAULT_CONFIG_NAME = "agentwire.yaml"


def load_config(path: Path | None = None) -> AgentwireConfig:
    """Load and validate an agentwire.yaml file.

    Args:
        path: Explicit config file path. If None, looks for
              agentwire.yaml in the current directory and falls back
              to built-in defaults when there is none.

    Returns:
        A validated AgentwireConfig instance.

    Raises:
        ConfigError: On missing explicit file, bad YAML, or validation failure.
    """
    config_path = _resolve_path(path)
    if config_path is None:
        return AgentwireConfig()

    raw = _read_yaml(config_path)
    _load_env(config_path.parent)
    config = _validate(raw)
    return _expand_paths(config)


def _resolve_path(path: Path | None) -> Path | None:
    if path is not None:
        resolved = Path(path)
        if not resolved.is_file():
            msg = f"Config file not found: {resolved}"
            raise ConfigError(msg)
        return resolved

    default = Path.cwd() / DEFAULT_CONFIG_NAME
    return default if default.is_file() else None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = f" at line {mark.line + 1}" if mark is not None else ""
        msg = f"Invalid YAML in {path.name}{where}"
        raise ConfigError(msg) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {path.name}, got {type(data).__name__}"
        raise ConfigError(msg)
    return data


def _load_env(config_dir: Path) -> None:
    env_path = config_dir / ".env"
    if env_path.is_file():
        load_dotenv(env_path)


def _validate(raw: dict[str, Any]) -> AgentwireConfig:
    try:
        return AgentwireConfig.model_validate(raw)
    except ValidationError as exc:
        problems = "\n".join(_describe(err) for err in exc.errors())
        msg = f"Config validation failed:\n{problems}"
        raise ConfigError(msg) from exc


def _describe(err: Mapping[str, Any]) -> str:
    """Render one pydantic error as an indented ``section.key: problem`` line."""
    setting = ".".join(str(part) for part in err["loc"])
    match err["type"]:
        case "extra_forbidden":
            problem = "Unknown setting"
        case "missing":
            problem = "This setting is required"
        case _:
            problem = f"Invalid value: {err['msg']}"
    return f"  {setting}: {problem}"


def _expand_paths(config: AgentwireConfig) -> AgentwireConfig:
    log_dir = os.path.expanduser(os.path.expandvars(config.logwatch.log_dir))
    logwatch = config.logwatch.model_copy(update={"log_dir": log_dir})
    return config.model_copy(update={"logwatch": logwatch})
