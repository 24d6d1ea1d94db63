"""Shared loading for CLI commands: configuration, projects, runner.

ConfigError raised here is turned into a CONFIG_ERROR exit by
handle_exceptions.
"""

from __future__ import annotations

from typing import Any

from aqua.config import GlobalConfig
from aqua.config_runtime import load_global_config, load_project_configs
from aqua.core import Aqua
from aqua.events import ConsoleReporter
from aqua.runner import TaskRunner
from aqua.utils.logging import logger, set_level


def load_cfg(options: dict[str, Any]) -> GlobalConfig:
    cfg = load_global_config(options["root"], options["config"])
    set_level(cfg.logging.level, colors=cfg.logging.colors)
    return cfg


def load_context(options: dict[str, Any]) -> tuple[Aqua, TaskRunner, ConsoleReporter]:
    """Load configuration and register every task for every project.

    Projects come from --project when given, otherwise from the ``projects``
    list of the global configuration file.
    """
    cfg = load_cfg(options)
    project_paths = list(options["projects"]) or list(cfg.projects)
    projects = load_project_configs(project_paths, options["root"])

    if not projects:
        logger.warning("No projects configured (use --project or 'projects' in the config file)")

    reporter = ConsoleReporter(quiet=options.get("quiet", False), colors=cfg.logging.colors)
    aqua = Aqua(cfg, reporter, root=options["root"])
    runner = TaskRunner(options["root"], reporter)
    aqua.init(projects, runner)
    return aqua, runner, reporter
