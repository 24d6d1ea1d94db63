"""Task contract shared by every AQUA task.

A task exposes four operations to the host:
- run(aqua, project, runner): execute the task's pipeline (coroutine)
- reg(aqua, project, runner): register the task with the host runner
- can_run(project, cfg): whether the project is configured for the task
- about(): usage text, with an ``{id}`` placeholder for the project id
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from aqua.utils.logging import logger

if TYPE_CHECKING:
    from aqua.config import GlobalConfig, ProjectConfig
    from aqua.core import Aqua
    from aqua.engines import EngineProvider
    from aqua.runner import ProjectRunner, TaskRunner


class BaseTask(ABC):
    """Uniform lifecycle wrapper around a task pipeline."""

    #: Key in the task registry
    name: str = ""
    #: Name registered with the host runner (namespaced per project by the runner)
    task_name: str = ""
    #: Warning emitted when the project is not configured for this task
    skip_message: str = ""

    def __init__(self, engines: EngineProvider | None = None, log: Any = None):
        if engines is None:
            from aqua.engines import NodeEngines

            engines = NodeEngines()
        self.engines = engines
        self.log = log if log is not None else logger

    @abstractmethod
    async def run(self, aqua: Aqua, project: ProjectConfig, runner: TaskRunner | ProjectRunner) -> None:
        """Run the task pipeline; failures are reported through aqua, never raised."""

    @abstractmethod
    def can_run(self, project: ProjectConfig, cfg: GlobalConfig) -> bool:
        """True when the project carries the configuration this task needs."""

    @abstractmethod
    def about(self) -> str:
        """Usage description."""

    def reg(self, aqua: Aqua, project: ProjectConfig, runner: TaskRunner | ProjectRunner) -> None:
        """Register the task; the body skips with a warning when can_run is false.

        The body signals completion as soon as the pipeline has been started;
        the runner keeps track of the spawned pipeline itself.
        """

        def body(done):
            if not self.can_run(project, aqua.cfg):
                aqua.warn(self.skip_message)
                done()
                return
            runner.spawn(self.run(aqua, project, runner))
            done()

        runner.register_task(self.task_name, [], body, about=self.about().replace("{id}", project.id))
