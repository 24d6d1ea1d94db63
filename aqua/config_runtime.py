"""Runtime configuration for AQUA - loading and merging configuration sources."""

import copy
import json
import os
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

from aqua.config import ConfigError, GlobalConfig, ProjectConfig
from aqua.utils.constants import DEFAULT_CONFIG_FILE, ENV_PREFIX
from aqua.utils.logging import logger

DEFAULTS = {
    "logging": {
        "level": "INFO",
        "colors": True,
    },
    "coverage": {
        "report": "reports/coverage",
    },
    "thresholds": {
        "coverage": {
            "statements": 80,
            "branches": 80,
            "functions": 80,
            "lines": 80,
        },
    },
}

# Sections whose scalar keys may be overridden from AQUA_<SECTION>_<KEY>
ENV_SECTIONS = ("logging", "coverage")

NODE_RUNNER_RESOURCE = "node_runner.json"


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base; values whose type doesn't match the default are ignored."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict):
            if isinstance(value, Mapping):
                _merge(current, value)
                continue
            mismatch = True
        else:
            mismatch = current is not None and not isinstance(value, type(current)) and not (
                isinstance(current, (int, float)) and isinstance(value, (int, float))
            )
        if mismatch:
            logger.warning(
                f"Ignoring config value for '{key}': expected {type(current).__name__}, "
                f"got {type(value).__name__}"
            )
        else:
            base[key] = copy.deepcopy(value)
    return base


def _coerce_env(value: str, default: Any) -> Any:
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def load_config_dict(root: str = ".", config_path: str | None = None) -> dict[str, Any]:
    """
    Load the merged global configuration mapping.

    Config priority (highest to lowest):
    1. Environment variables (AQUA_<SECTION>_<KEY>, e.g. AQUA_COVERAGE_REPORT)
    2. The JSON config file (aqua.json in root unless config_path is given)
    3. Built-in defaults

    Args:
        root: Root directory to look for the config file
        config_path: Explicit config file path (relative to root)

    Returns:
        Configuration dictionary with merged values

    Raises:
        ConfigError: If an explicitly named file is missing or any file is malformed
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / (config_path or DEFAULT_CONFIG_FILE)
    if path.exists():
        user = _read_json(path)
        if not isinstance(user, dict):
            raise ConfigError(f"{path} must contain a JSON object")
        _merge(cfg, user)
        logger.debug(f"Loaded global configuration from {path}")
    elif config_path:
        raise ConfigError(f"Config file not found: {path}")
    else:
        logger.debug(f"No {DEFAULT_CONFIG_FILE} in {root}, using defaults")

    for section in ENV_SECTIONS:
        for key, default in list(cfg.get(section, {}).items()):
            env_var = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                try:
                    cfg[section][key] = _coerce_env(os.environ[env_var], default)
                except ValueError:
                    logger.warning(f"Ignoring {env_var}: not a valid {type(default).__name__}")

    return cfg


def load_global_config(root: str = ".", config_path: str | None = None) -> GlobalConfig:
    """Load the global configuration once, before any task runs."""
    return GlobalConfig.from_dict(load_config_dict(root, config_path))


def load_project_configs(paths: list[str], root: str = ".") -> list[ProjectConfig]:
    """Read project configuration files.

    Each file holds one project object or a list of them. A project without
    an explicit ``root`` runs from the directory containing its file.
    """
    projects = []
    for p in paths:
        path = Path(root) / p
        data = _read_json(path)
        entries = data if isinstance(data, list) else [data]
        for entry in entries:
            if not isinstance(entry, dict):
                raise ConfigError(f"{path}: project entries must be JSON objects")
            if not entry.get("id"):
                raise ConfigError(f"{path}: project is missing an 'id'")
            entry = dict(entry)
            entry.setdefault("root", str(path.parent))
            projects.append(ProjectConfig.from_dict(entry))
    return projects


def load_node_runner_config(cfg: GlobalConfig, root: str = ".") -> dict[str, Any]:
    """Resolve the node test runner configuration resource.

    The bundled defaults are overlaid with ``testing.node``, which is either
    a path to a JSON file (relative to root) or an inline mapping.
    """
    bundled = resources.files("aqua.resources").joinpath(NODE_RUNNER_RESOURCE)
    runner_cfg = json.loads(bundled.read_text(encoding="utf-8"))

    node = cfg.testing.node
    if node is None:
        return runner_cfg
    if isinstance(node, str):
        override = _read_json(Path(root) / node)
    elif isinstance(node, Mapping):
        override = node
    else:
        raise ConfigError(f"testing.node must be a path or an object, got {type(node).__name__}")

    if not isinstance(override, Mapping):
        raise ConfigError("node runner configuration must be a JSON object")
    return _merge(runner_cfg, override)
