"""The Aqua facade handed to every task.

Holds the global configuration (read once, before any task runs) and the
shared reporting channel, and registers the task set for each project.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from aqua.config import GlobalConfig, ProjectConfig
from aqua.events import ConsoleReporter, Reporter
from aqua.tasks import TASKS, BaseTask
from aqua.utils.logging import logger

if TYPE_CHECKING:
    from aqua.engines import EngineProvider
    from aqua.runner import TaskRunner


class Aqua:
    """Global configuration plus the log/warn/error channel."""

    def __init__(
        self,
        cfg: GlobalConfig | None = None,
        reporter: Reporter | None = None,
        engines: EngineProvider | None = None,
        root: str | Path = ".",
    ):
        self.cfg = cfg or GlobalConfig()
        self.reporter = reporter or ConsoleReporter(colors=self.cfg.logging.colors)
        self.root = Path(root)

        if engines is None:
            from aqua.engines import NodeEngines

            engines = NodeEngines()
        self.engines = engines
        self.tasks: dict[str, BaseTask] = {name: cls(engines) for name, cls in TASKS.items()}

    def log(self, *args: object) -> None:
        self.reporter.log(*args)

    def warn(self, *args: object) -> None:
        self.reporter.warn(*args)

    def error(self, *args: object) -> None:
        self.reporter.error(*args)

    def init(self, projects: Iterable[ProjectConfig], runner: TaskRunner) -> None:
        """Register every task for every project on the host runner."""
        for project in projects:
            project_runner = runner.for_project(project.id, project.root)
            for task in self.tasks.values():
                task.reg(self, project, project_runner)
            logger.debug(f"Registered {len(self.tasks)} tasks for project {project.id}")
