"""Lint task: validates a project's JavaScript files with the linter engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from aqua.pipeline.structures import StageError

from .base import BaseTask

if TYPE_CHECKING:
    from aqua.config import GlobalConfig, ProjectConfig
    from aqua.core import Aqua

ERRORS_MESSAGE = "Lint Check: Lint errors found"
SUCCESS_MESSAGE = "Lint Check: No errors found"


class LintTask(BaseTask):
    name = "lint"
    task_name = "lint"
    skip_message = "lint source code not configured"

    async def run(self, aqua: Aqua, project: ProjectConfig, runner) -> None:
        stages = [
            self.engines.linter({"config": aqua.cfg.lint.config}),
            self.engines.lint_reporter({"format": "default"}),
            self.engines.lint_reporter({"format": "fail"}),
        ]
        try:
            await runner.pipe(runner.src(project.alljs or ()), *stages)
        except StageError as e:
            aqua.log(ERRORS_MESSAGE)
            aqua.error(e)
            return

        aqua.log(SUCCESS_MESSAGE)

    def can_run(self, project: ProjectConfig, cfg: GlobalConfig) -> bool:
        # An empty list still counts as configured
        return project.alljs is not None

    def about(self) -> str:
        return "`aqua run {id}-lint` to validate source files against anti-patterns"
