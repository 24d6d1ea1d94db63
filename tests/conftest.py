"""Pytest configuration and fixtures."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from aqua.config import GlobalConfig, ProjectConfig
from aqua.core import Aqua
from aqua.pipeline.stream import pipe
from aqua.pipeline.structures import FileStream
from aqua.runner import RegisteredTask


class FakeStage:
    """Pipe-compatible stage that records what it consumed."""

    def __init__(self, factory, options, calls, error=None, context=None):
        self.factory = factory
        self.options = dict(options)
        self.calls = calls
        self.error = error
        self.context = context or {}

    @property
    def name(self):
        return self.factory

    async def process(self, stream):
        self.calls.append((self.factory, list(stream.files)))
        if self.error is not None:
            raise self.error
        return stream.derive(**self.context)


class FakeEngines:
    """EngineProvider double.

    ``fail`` maps a factory name to the exception its stage raises;
    ``created`` keeps (factory, options) for every stage built, ``calls``
    the (factory, files) every stage processed, in order.
    """

    FACTORIES = (
        "linter",
        "lint_reporter",
        "instrumenter",
        "node_test_runner",
        "browser_test_runner",
        "report_writer",
        "threshold_enforcer",
    )

    def __init__(self):
        self.fail = {}
        self.created = []
        self.calls = []

    def __getattr__(self, name):
        if name not in self.FACTORIES:
            raise AttributeError(name)

        def factory(options):
            self.created.append((name, dict(options)))
            return FakeStage(name, options, self.calls, error=self.fail.get(name))

        return factory

    def options_for(self, factory):
        return [opts for name, opts in self.created if name == factory]

    def called(self):
        return [name for name, _files in self.calls]


class FakeRunner:
    """Host runner double: streams are the patterns as given, spawns are recorded."""

    def __init__(self, root):
        self.root = Path(root)
        self.tasks = {}
        self.opened = []
        self.spawned = []

    def src(self, patterns, cwd=None):
        patterns = [patterns] if isinstance(patterns, str) else list(patterns)
        self.opened.append(patterns)
        return FileStream(patterns=patterns, files=list(patterns), cwd=self.root)

    async def pipe(self, stream, *transforms):
        return await pipe(stream, *transforms)

    def register_task(self, name, deps, body, about=None):
        self.tasks[name] = RegisteredTask(name=name, deps=list(deps), body=body, about=about)

    def spawn(self, coro):
        self.spawned.append(coro)
        return coro


@pytest.fixture
def engines():
    return FakeEngines()


@pytest.fixture
def reporter():
    return MagicMock(spec=["log", "warn", "error"])


@pytest.fixture
def task_log():
    return MagicMock()


@pytest.fixture
def global_config():
    return GlobalConfig.from_dict(
        {
            "testing": {"web": {}},
            "logging": {"level": "INFO", "colors": True},
            "coverage": {"report": "reports/coverage"},
            "thresholds": {"coverage": {"statements": 80, "branches": 80, "functions": 80, "lines": 80}},
        }
    )


@pytest.fixture
def aqua(global_config, reporter, engines, tmp_path):
    return Aqua(global_config, reporter, engines, root=tmp_path)


@pytest.fixture
def fake_runner(tmp_path):
    return FakeRunner(tmp_path)


@pytest.fixture
def node_project():
    return ProjectConfig.from_dict(
        {
            "id": "Svc",
            "type": "nodejs",
            "src": ["lib/**/*.js"],
            "unit": {"tests": ["test/**/*.spec.js"]},
        }
    )


@pytest.fixture
def web_project():
    return ProjectConfig.from_dict(
        {
            "id": "App",
            "type": "web",
            "src": ["src/app.js"],
            "unit": {"globals": ["vendor/angular.js"], "tests": ["test/app.spec.js"]},
        }
    )
