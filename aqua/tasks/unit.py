"""Unit test task.

Collects a project's unit test files, dispatches them to the browser
(web) or node (nodejs) backend, writes coverage reports and enforces the
configured coverage thresholds.

Node pipeline:
    src -> instrumenter
    files -> node test runner -> report writer
    "." -> threshold enforcer

Web pipeline:
    files -> browser test runner (coverage preprocessors/reporters when enabled)
    "." -> threshold enforcer (when coverage is enabled)

Every failure is forwarded unchanged to ``aqua.error`` exactly once and ends
the invocation; nothing is retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any

from aqua.config import ConfigError, UnitConfig
from aqua.config_runtime import load_node_runner_config
from aqua.pipeline.structures import StageError, Transform
from aqua.utils.constants import AQUA_DIR, WORK_DIR_NAME

from .base import BaseTask

if TYPE_CHECKING:
    from aqua.config import GlobalConfig, ProjectConfig
    from aqua.core import Aqua
    from aqua.runner import ProjectRunner, TaskRunner

BOOTSTRAP_ENTRY = "sourceonly.js"
SUCCESS_MESSAGE = "Coverage is at or over the minimum thresholds."
WEB_NOT_CONFIGURED_MESSAGE = "browser testing not configured (testing.web), skipping unit tests for"


def bootstrap_path() -> str:
    """Absolute path of the bootstrap entry that always loads first."""
    return str(resources.files("aqua.resources").joinpath(BOOTSTRAP_ENTRY))


def work_dir(project_id: str) -> str:
    """Per-project scratch directory, relative to the project root."""
    return str(AQUA_DIR / WORK_DIR_NAME / project_id.lower())


def report_dir(cfg: GlobalConfig, project_id: str) -> Path:
    return Path(cfg.coverage.report) / project_id.lower()


class UnitTask(BaseTask):
    """Runs a project's unit tests with coverage."""

    name = "unit"
    task_name = "test-unit"
    skip_message = "unit testing source code not configured"

    def collect(self, unit: UnitConfig | None, source_files) -> list[str]:
        """Ordered load list: bootstrap, globals, deps, mocks, sources, tests."""
        unit = unit or UnitConfig()
        files = [bootstrap_path()]
        for group in (unit.globals, unit.deps, unit.mocks):
            if group:
                files.extend(group)
        files.extend(source_files or ())
        files.extend(unit.tests)
        return files

    async def run(self, aqua: Aqua, project: ProjectConfig, runner: TaskRunner | ProjectRunner) -> None:
        files = self.collect(project.unit, project.src)
        project_type = project.effective_type

        if project_type == "web":
            await self.test_web(aqua, project, files, runner)
        elif project_type == "nodejs":
            await self.test_node(aqua, project, files, runner)
        else:
            aqua.error("unsupported project type:", project_type)

    def get_coverage_config(self, cfg: GlobalConfig, project: ProjectConfig) -> dict[str, Any]:
        """Karma coverage settings for a project.

        Source patterns are routed through the coverage preprocessor and the
        report lands in ``<coverage.report>/<id lower>``.
        """
        reporters = list(cfg.coverage.reporters)
        # The threshold enforcer reads the summary report
        if "json-summary" not in reporters:
            reporters.append("json-summary")

        return {
            "preprocessors": {p: ["coverage"] for p in project.src if not p.startswith("!")},
            "reporters": ["coverage"],
            "coverage_reporter": {
                "dir": str(report_dir(cfg, project.id)),
                "reporters": [{"type": r, "subdir": "."} for r in reporters],
            },
        }

    async def test_web(self, aqua: Aqua, project: ProjectConfig, files: list[str], runner) -> None:
        cfg = aqua.cfg
        web = cfg.testing.web
        if web is None:
            aqua.warn(WEB_NOT_CONFIGURED_MESSAGE, project.id)
            return

        options: dict[str, Any] = {
            "log_level": cfg.logging.level,
            "colors": cfg.logging.colors,
            "browsers": list(web.browsers),
            "frameworks": list(web.frameworks),
            "reporters": list(web.reporters),
            "work_dir": work_dir(project.id),
        }
        if web.coverage:
            coverage = self.get_coverage_config(cfg, project)
            options["reporters"] += [r for r in coverage["reporters"] if r not in options["reporters"]]
            options["preprocessors"] = coverage["preprocessors"]
            options["coverage_reporter"] = coverage["coverage_reporter"]

        browser_runner = self.engines.browser_test_runner(options)
        try:
            await runner.pipe(runner.src(files), browser_runner)
        except StageError as e:
            aqua.error(e)
            return

        if web.coverage:
            await self.enforce_thresholds(aqua, project.id, runner)

    async def test_node(self, aqua: Aqua, project: ProjectConfig, files: list[str], runner) -> None:
        instrumenter = self.engines.instrumenter({"work_dir": work_dir(project.id)})
        try:
            await runner.pipe(runner.src(project.src), instrumenter)
        except StageError as e:
            aqua.error(e)
            return

        await self.run_node_tests(aqua, project.id, files, runner)

    async def run_node_tests(self, aqua: Aqua, project_id: str, files: list[str], runner) -> None:
        try:
            node_cfg = load_node_runner_config(aqua.cfg, getattr(aqua, "root", "."))
        except ConfigError as e:
            aqua.error(e)
            return

        options = dict(node_cfg.get("jasmine") or {})
        options["show_colors"] = aqua.cfg.logging.colors
        options["work_dir"] = work_dir(project_id)

        test_runner = self.engines.node_test_runner(options)
        try:
            await runner.pipe(
                runner.src(files),
                test_runner,
                self.create_reports(aqua.cfg, node_cfg, project_id),
            )
        except StageError as e:
            aqua.error(e)
            return

        await self.enforce_thresholds(aqua, project_id, runner)

    def create_reports(self, cfg: GlobalConfig, node_runner_cfg: Mapping[str, Any], project_id: str) -> Transform:
        """Report writer stage for a node project."""
        return self.engines.report_writer(
            {
                "dir": str(report_dir(cfg, project_id)),
                "reporters": list(node_runner_cfg["coverage"]["reporters"]),
            }
        )

    async def enforce_thresholds(self, aqua: Aqua, project_id: str, runner) -> None:
        enforcer = self.engines.threshold_enforcer(
            {
                "thresholds": dict(aqua.cfg.thresholds.coverage),
                "root_directory": str(report_dir(aqua.cfg, project_id)),
            }
        )
        try:
            await runner.pipe(runner.src("."), enforcer)
        except StageError as e:
            self.log.warning(e.message)
            aqua.error(e)
            return

        self.log.info(SUCCESS_MESSAGE)

    def can_run(self, project: ProjectConfig, cfg: GlobalConfig) -> bool:
        return bool(project.src) and project.unit is not None

    def about(self) -> str:
        return "`aqua run {id}-test-unit` to run unit tests against the source code"
