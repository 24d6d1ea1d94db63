"""Tests for the default Node.js engines.

External tools are never started: the toolbox is mocked and
_run_command is patched, so these tests check command construction,
output parsing and error mapping.
"""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from aqua.engines import (
    EslintLinter,
    Finding,
    JasmineRunner,
    KarmaRunner,
    LintReporter,
    NodeEngines,
    NycInstrumenter,
    NycReportWriter,
    ThresholdEnforcer,
)
from aqua.pipeline.structures import FileStream, StageError


@pytest.fixture
def toolbox_factory():
    """Toolbox class double resolving every tool to /usr/bin/<name>."""
    factory = MagicMock()
    factory.return_value.get_tool.side_effect = lambda name: [f"/usr/bin/{name}"]
    return factory


@pytest.fixture
def stream(tmp_path):
    root = tmp_path.resolve()
    return FileStream(patterns=["src/*.js"], files=["src/a.js", "src/b.js"], cwd=root)


def run_engine(engine, stream, returncode=0, stdout="", stderr=""):
    with patch.object(engine, "_run_command", new_callable=AsyncMock) as run_command:
        run_command.return_value = (returncode, stdout, stderr)
        result = asyncio.run(engine.process(stream))
    return result, run_command


class TestNodeEngines:
    def test_factories(self):
        engines = NodeEngines()
        assert isinstance(engines.linter({}), EslintLinter)
        assert isinstance(engines.lint_reporter({"format": "fail"}), LintReporter)
        assert isinstance(engines.instrumenter({}), NycInstrumenter)
        assert isinstance(engines.node_test_runner({}), JasmineRunner)
        assert isinstance(engines.browser_test_runner({}), KarmaRunner)
        assert isinstance(engines.report_writer({"dir": "r"}), NycReportWriter)
        assert isinstance(engines.threshold_enforcer({}), ThresholdEnforcer)

    def test_options_are_copied(self):
        options = {"format": "fail"}
        reporter = NodeEngines().lint_reporter(options)
        options["format"] = "default"
        assert reporter.options == {"format": "fail"}


class TestEslintLinter:
    def test_command(self, toolbox_factory, stream):
        linter = EslintLinter(toolbox_factory=toolbox_factory, options={"config": ".eslintrc.json"})

        _result, run_command = run_engine(linter, stream, stdout="[]")

        cmd = run_command.await_args.args[0]
        assert cmd == [
            "/usr/bin/eslint",
            "--format",
            "json",
            "--config",
            str(stream.cwd / ".eslintrc.json"),
            "src/a.js",
            "src/b.js",
        ]

    def test_parses_findings(self, toolbox_factory, stream):
        output = json.dumps(
            [
                {
                    "filePath": str(stream.cwd / "src" / "a.js"),
                    "messages": [
                        {"line": 3, "column": 5, "ruleId": "no-undef", "message": "x is not defined", "severity": 2},
                        {"line": 7, "column": 1, "ruleId": "semi", "message": "Missing semicolon", "severity": 1},
                        {"line": None, "column": None, "ruleId": None, "message": "Parsing error", "severity": 2},
                    ],
                }
            ]
        )
        linter = EslintLinter(toolbox_factory=toolbox_factory)

        result, _ = run_engine(linter, stream, returncode=1, stdout=output)

        findings = result.context["findings"]
        assert findings[0] == Finding(
            tool="eslint",
            file="src/a.js",
            line=3,
            column=5,
            rule="no-undef",
            message="x is not defined",
            severity="error",
        )
        assert findings[1].severity == "warning"
        assert findings[2].rule == "eslint-error"
        assert findings[2].line == 0

    def test_fatal_exit_code(self, toolbox_factory, stream):
        linter = EslintLinter(toolbox_factory=toolbox_factory)

        with pytest.raises(StageError, match="exit code 2"):
            run_engine(linter, stream, returncode=2, stderr="Oops! Something went wrong!")

    def test_invalid_json(self, toolbox_factory, stream):
        linter = EslintLinter(toolbox_factory=toolbox_factory)

        with pytest.raises(StageError, match="invalid JSON"):
            run_engine(linter, stream, returncode=1, stdout="not json")

    def test_no_files(self, toolbox_factory, tmp_path):
        empty = FileStream(patterns=["none/*.js"], files=[], cwd=tmp_path)
        linter = EslintLinter(toolbox_factory=toolbox_factory)

        result, run_command = run_engine(linter, empty)

        assert result.context["findings"] == []
        run_command.assert_not_awaited()

    def test_missing_tool(self, stream):
        factory = MagicMock()
        factory.return_value.get_tool.side_effect = FileNotFoundError("eslint not found")
        linter = EslintLinter(toolbox_factory=factory)

        with pytest.raises(StageError, match="eslint not found"):
            run_engine(linter, stream)


class TestLintReporter:
    def _stream(self, stream, *severities):
        findings = [
            Finding("eslint", "src/a.js", i + 1, 1, "rule", "msg", severity)
            for i, severity in enumerate(severities)
        ]
        return stream.derive(findings=findings)

    def test_fail_on_errors(self, stream):
        reporter = LintReporter(options={"format": "fail"})
        with pytest.raises(StageError, match="1 lint error"):
            asyncio.run(reporter.process(self._stream(stream, "error", "warning")))

    def test_warnings_pass(self, stream):
        reporter = LintReporter(options={"format": "fail"})
        result = asyncio.run(reporter.process(self._stream(stream, "warning")))
        assert len(result.context["findings"]) == 1

    def test_default_prints_table(self, stream):
        reporter = LintReporter(options={"format": "default"})
        with patch("aqua.pipeline.ui.console") as console:
            asyncio.run(reporter.process(self._stream(stream, "error")))
        console.print.assert_called_once()


class TestNyc:
    def test_instrument_command(self, toolbox_factory, stream):
        instrumenter = NycInstrumenter(toolbox_factory=toolbox_factory, options={"work_dir": ".aqua/work/svc"})

        result, run_command = run_engine(instrumenter, stream)

        out_dir = stream.cwd / ".aqua" / "work" / "svc" / "instrumented"
        assert run_command.await_args.args[0] == [
            "/usr/bin/nyc",
            "instrument",
            ".",
            str(out_dir),
            "--delete",
            "--include",
            "src/a.js",
            "--include",
            "src/b.js",
        ]
        assert result.context["instrumented_dir"] == str(out_dir)

    def test_instrument_failure(self, toolbox_factory, stream):
        instrumenter = NycInstrumenter(toolbox_factory=toolbox_factory)

        with pytest.raises(StageError, match="instrumentation failed"):
            run_engine(instrumenter, stream, returncode=1, stderr="SyntaxError")

    def test_report_requires_coverage_data(self, toolbox_factory, stream):
        writer = NycReportWriter(toolbox_factory=toolbox_factory, options={"dir": "reports/coverage/svc"})

        with pytest.raises(StageError, match="no coverage data"):
            run_engine(writer, stream)

    def test_report_command(self, toolbox_factory, stream, tmp_path):
        temp_dir = tmp_path / ".nyc_output"
        temp_dir.mkdir()
        (temp_dir / "coverage.json").write_text("{}")
        writer = NycReportWriter(
            toolbox_factory=toolbox_factory,
            options={"dir": "reports/coverage/svc", "reporters": ["lcov", "text-summary"]},
        )

        result, run_command = run_engine(writer, stream.derive(coverage_temp_dir=str(temp_dir)))

        report_dir = stream.cwd / "reports" / "coverage" / "svc"
        assert run_command.await_args.args[0] == [
            "/usr/bin/nyc",
            "report",
            "--temp-dir",
            str(temp_dir),
            "--report-dir",
            str(report_dir),
            "--reporter",
            "lcov",
            "--reporter",
            "text-summary",
            "--reporter",
            "json-summary",
        ]
        assert result.context["report_dir"] == str(report_dir)


class TestJasmineRunner:
    def test_config_and_command(self, toolbox_factory, stream):
        runner = JasmineRunner(
            toolbox_factory=toolbox_factory,
            options={"random": False, "show_colors": False, "work_dir": ".aqua/work/svc"},
        )

        result, run_command = run_engine(runner, stream)

        work_dir = stream.cwd / ".aqua" / "work" / "svc"
        config = json.loads((work_dir / "jasmine.json").read_text())
        assert config["random"] is False
        assert config["spec_dir"] == ""
        assert config["spec_files"] == ["src/a.js", "src/b.js"]
        assert config["helpers"] == [".aqua/work/svc/helpers/coverage_hook.js"]
        assert "show_colors" not in config

        cmd = run_command.await_args.args[0]
        assert cmd == ["/usr/bin/jasmine", f"--config={Path('.aqua/work/svc/jasmine.json')}", "--no-color"]
        env = run_command.await_args.kwargs["env"]
        assert env["AQUA_INSTRUMENTED_DIR"] == str(work_dir / "instrumented")
        assert result.context["coverage_temp_dir"] == str(work_dir / ".nyc_output")

    def test_failing_specs(self, toolbox_factory, stream):
        runner = JasmineRunner(toolbox_factory=toolbox_factory)

        with pytest.raises(StageError, match="unit tests failed"):
            run_engine(runner, stream, returncode=3, stdout="2 specs, 1 failure")


class TestKarmaRunner:
    def test_settings(self, stream):
        runner = KarmaRunner(
            options={
                "log_level": "warning",
                "colors": False,
                "reporters": ["progress", "coverage"],
                "preprocessors": {"src/*.js": ["coverage"]},
                "coverage_reporter": {"dir": "reports/coverage/app", "reporters": []},
            }
        )

        settings = runner.build_settings(stream)

        assert settings["files"] == ["src/a.js", "src/b.js"]
        assert settings["logLevel"] == "WARN"
        assert settings["colors"] is False
        assert settings["singleRun"] is True
        assert settings["preprocessors"] == {"src/*.js": ["coverage"]}
        assert settings["coverageReporter"]["dir"] == "reports/coverage/app"

    def test_no_coverage_settings_without_options(self, stream):
        settings = KarmaRunner().build_settings(stream)
        assert "preprocessors" not in settings
        assert "coverageReporter" not in settings

    def test_command(self, toolbox_factory, stream):
        runner = KarmaRunner(toolbox_factory=toolbox_factory, options={"work_dir": ".aqua/work/app"})

        with patch("aqua.pipeline.ui.console"):
            _result, run_command = run_engine(runner, stream, stdout="Executed 3 of 3 SUCCESS")

        config_path = stream.cwd / ".aqua" / "work" / "app" / "karma.conf.cjs"
        assert config_path.exists()
        assert "singleRun" in config_path.read_text()
        assert run_command.await_args.args[0] == ["/usr/bin/karma", "start", str(config_path), "--single-run"]

    def test_failure(self, toolbox_factory, stream):
        runner = KarmaRunner(toolbox_factory=toolbox_factory)

        with pytest.raises(StageError, match="browser unit tests failed"):
            run_engine(runner, stream, returncode=1, stderr="Chrome failed to start")


class TestRunCommand:
    def test_missing_executable(self, tmp_path):
        linter = EslintLinter()
        with pytest.raises(StageError, match="cannot start"):
            asyncio.run(linter._run_command([str(tmp_path / "no-such-binary")], cwd=tmp_path))
