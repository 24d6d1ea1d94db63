"""Tests for configuration loading and data contracts."""

import json
from pathlib import Path

import pytest

from aqua.config import ConfigError, GlobalConfig, ProjectConfig, UnitConfig, WebTestingConfig
from aqua.config_runtime import (
    load_config_dict,
    load_global_config,
    load_node_runner_config,
    load_project_configs,
)


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("AQUA_LOGGING_LEVEL", "AQUA_LOGGING_COLORS", "AQUA_COVERAGE_REPORT"):
        monkeypatch.delenv(var, raising=False)


class TestGlobalConfig:
    def test_defaults_without_file(self, tmp_path):
        cfg = load_global_config(str(tmp_path))

        assert cfg.logging.level == "INFO"
        assert cfg.logging.colors is True
        assert cfg.coverage.report == "reports/coverage"
        assert cfg.thresholds.coverage == {"statements": 80, "branches": 80, "functions": 80, "lines": 80}
        assert cfg.testing.web is None
        assert cfg.projects == ()

    def test_file_overrides_defaults(self, tmp_path):
        write_json(
            tmp_path / "aqua.json",
            {
                "logging": {"level": "DEBUG"},
                "thresholds": {"coverage": {"lines": 95}},
                "testing": {"web": {"browsers": ["Firefox"], "coverage": False}},
                "projects": ["app/project.json"],
            },
        )

        cfg = load_global_config(str(tmp_path))

        assert cfg.logging.level == "DEBUG"
        assert cfg.thresholds.coverage["lines"] == 95
        assert cfg.thresholds.coverage["branches"] == 80
        assert cfg.testing.web == WebTestingConfig(coverage=False, browsers=("Firefox",))
        assert cfg.projects == ("app/project.json",)

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        write_json(tmp_path / "aqua.json", {"coverage": {"report": "out/cov"}})
        monkeypatch.setenv("AQUA_COVERAGE_REPORT", "env/cov")
        monkeypatch.setenv("AQUA_LOGGING_COLORS", "false")

        cfg = load_global_config(str(tmp_path))

        assert cfg.coverage.report == "env/cov"
        assert cfg.logging.colors is False

    def test_type_mismatch_ignored(self, tmp_path):
        write_json(tmp_path / "aqua.json", {"logging": {"colors": "yes please"}})

        assert load_config_dict(str(tmp_path))["logging"]["colors"] is True

    def test_section_replaced_by_scalar_ignored(self, tmp_path):
        write_json(tmp_path / "aqua.json", {"coverage": "reports", "logging": None})

        cfg = load_global_config(str(tmp_path))

        assert cfg.coverage.report == "reports/coverage"
        assert cfg.logging.level == "INFO"

    def test_bad_threshold_value(self, tmp_path):
        write_json(tmp_path / "aqua.json", {"thresholds": {"coverage": {"mutations": "lots"}}})

        with pytest.raises(ConfigError, match="thresholds.coverage.mutations"):
            load_global_config(str(tmp_path))

    def test_thresholds_must_be_an_object(self):
        with pytest.raises(ConfigError, match="must be an object"):
            GlobalConfig.from_dict({"thresholds": {"coverage": [80]}})

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_global_config(str(tmp_path), "custom.json")

    def test_malformed_file(self, tmp_path):
        (tmp_path / "aqua.json").write_text("{oops", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_global_config(str(tmp_path))

    def test_to_dict_is_json_serializable(self, tmp_path):
        cfg = load_global_config(str(tmp_path))
        data = json.loads(json.dumps(cfg.to_dict()))
        assert data["coverage"]["report"] == "reports/coverage"

    def test_config_is_frozen(self):
        cfg = GlobalConfig()
        with pytest.raises(AttributeError):
            cfg.projects = ("x",)


class TestProjectConfigs:
    def test_single_project_file(self, tmp_path):
        (tmp_path / "app").mkdir()
        write_json(
            tmp_path / "app" / "project.json",
            {"id": "App", "src": "src/*.js", "unit": {"tests": ["test/*.js"]}},
        )

        [project] = load_project_configs(["app/project.json"], str(tmp_path))

        assert project.id == "App"
        assert project.src == ("src/*.js",)
        assert project.unit == UnitConfig(tests=("test/*.js",))
        assert project.root == str(tmp_path / "app")
        assert project.type is None
        assert project.effective_type == "web"

    def test_list_of_projects(self, tmp_path):
        write_json(tmp_path / "projects.json", [{"id": "a", "root": "a"}, {"id": "b", "type": "nodejs"}])

        projects = load_project_configs(["projects.json"], str(tmp_path))

        assert [p.id for p in projects] == ["a", "b"]
        assert projects[0].root == "a"
        assert projects[1].effective_type == "nodejs"

    def test_missing_id(self, tmp_path):
        write_json(tmp_path / "p.json", {"src": ["a.js"]})
        with pytest.raises(ConfigError, match="missing an 'id'"):
            load_project_configs(["p.json"], str(tmp_path))

    def test_alljs_absent_vs_empty(self):
        assert ProjectConfig.from_dict({"id": "a"}).alljs is None
        assert ProjectConfig.from_dict({"id": "a", "alljs": []}).alljs == ()

    def test_bad_pattern_type(self):
        with pytest.raises(ConfigError):
            ProjectConfig.from_dict({"id": "a", "src": 42})


class TestNodeRunnerConfig:
    def test_bundled_defaults(self):
        node_cfg = load_node_runner_config(GlobalConfig())

        assert node_cfg["jasmine"]["random"] is False
        assert node_cfg["coverage"]["reporters"] == ["lcov", "json", "json-summary", "text-summary"]

    def test_inline_override(self):
        cfg = GlobalConfig.from_dict({"testing": {"node": {"jasmine": {"random": True}}}})

        node_cfg = load_node_runner_config(cfg)

        assert node_cfg["jasmine"]["random"] is True
        assert node_cfg["jasmine"]["includeStackTrace"] is True

    def test_null_section_keeps_bundled_defaults(self):
        cfg = GlobalConfig.from_dict({"testing": {"node": {"coverage": None, "jasmine": "fast"}}})

        node_cfg = load_node_runner_config(cfg)

        assert node_cfg["coverage"]["reporters"] == ["lcov", "json", "json-summary", "text-summary"]
        assert node_cfg["jasmine"]["random"] is False

    def test_file_override(self, tmp_path):
        write_json(tmp_path / "runner.json", {"coverage": {"reporters": ["cobertura"]}})
        cfg = GlobalConfig.from_dict({"testing": {"node": "runner.json"}})

        node_cfg = load_node_runner_config(cfg, str(tmp_path))

        assert node_cfg["coverage"]["reporters"] == ["cobertura"]

    def test_non_object_resource(self, tmp_path):
        write_json(tmp_path / "runner.json", ["not", "an", "object"])
        cfg = GlobalConfig.from_dict({"testing": {"node": "runner.json"}})

        with pytest.raises(ConfigError):
            load_node_runner_config(cfg, str(tmp_path))
