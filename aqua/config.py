"""Configuration data contracts for AQUA.

Global and project configuration are frozen dataclasses. They are built
once (see config_runtime.py) and then passed explicitly to every task and
stage; nothing reads configuration from module state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

DEFAULT_PROJECT_TYPE = "web"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or has the wrong shape."""


def _as_patterns(value: Any) -> tuple[str, ...]:
    """Normalize a glob string or list of globs into an ordered tuple."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    raise ConfigError(f"Expected a pattern or list of patterns, got {type(value).__name__}")


def _as_thresholds(value: Any) -> dict[str, float]:
    """Threshold percentages by coverage dimension."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"thresholds.coverage must be an object, got {type(value).__name__}")
    thresholds = {}
    for dimension, pct in value.items():
        if isinstance(pct, bool):
            raise ConfigError(f"thresholds.coverage.{dimension} must be a number, got bool")
        try:
            thresholds[dimension] = float(pct)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"thresholds.coverage.{dimension} must be a number, got {pct!r}") from e
    return thresholds


@dataclass(frozen=True)
class WebTestingConfig:
    """Browser test runner settings (``testing.web``)."""

    coverage: bool = True
    browsers: tuple[str, ...] = ("ChromeHeadless",)
    frameworks: tuple[str, ...] = ("jasmine",)
    reporters: tuple[str, ...] = ("progress",)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WebTestingConfig:
        return cls(
            coverage=bool(data.get("coverage", True)),
            browsers=_as_patterns(data.get("browsers", cls.browsers)),
            frameworks=_as_patterns(data.get("frameworks", cls.frameworks)),
            reporters=_as_patterns(data.get("reporters", cls.reporters)),
        )


@dataclass(frozen=True)
class TestingConfig:
    """Test runner settings (``testing``).

    ``node`` is either a path to a JSON runner configuration resource or an
    inline mapping with the same shape.
    """

    __test__ = False

    web: WebTestingConfig | None = None
    node: str | Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TestingConfig:
        web = data.get("web")
        return cls(
            web=WebTestingConfig.from_dict(web) if isinstance(web, Mapping) else None,
            node=data.get("node"),
        )


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    colors: bool = True


@dataclass(frozen=True)
class CoverageConfig:
    report: str = "reports/coverage"
    reporters: tuple[str, ...] = ("html", "json-summary", "text-summary")


@dataclass(frozen=True)
class ThresholdsConfig:
    coverage: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class LintConfig:
    config: str | None = None


@dataclass(frozen=True)
class GlobalConfig:
    """Process-wide configuration, read only once loaded."""

    testing: TestingConfig = field(default_factory=TestingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    projects: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GlobalConfig:
        """Build a GlobalConfig from a (merged) configuration mapping.

        Missing sections fall back to their defaults.
        """
        testing = data.get("testing") or {}
        logging_cfg = data.get("logging") or {}
        coverage = data.get("coverage") or {}
        thresholds = data.get("thresholds") or {}
        lint = data.get("lint") or {}

        return cls(
            testing=TestingConfig.from_dict(testing),
            logging=LoggingConfig(
                level=str(logging_cfg.get("level", LoggingConfig.level)),
                colors=bool(logging_cfg.get("colors", LoggingConfig.colors)),
            ),
            coverage=CoverageConfig(
                report=str(coverage.get("report", CoverageConfig.report)),
                reporters=_as_patterns(coverage.get("reporters", CoverageConfig.reporters)),
            ),
            thresholds=ThresholdsConfig(
                coverage=_as_thresholds(thresholds.get("coverage")),
            ),
            lint=LintConfig(config=lint.get("config")),
            projects=_as_patterns(data.get("projects")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        d = asdict(self)
        d["thresholds"]["coverage"] = dict(self.thresholds.coverage)
        return d


@dataclass(frozen=True)
class UnitConfig:
    """Unit test file groups (``unit``), each an ordered pattern list."""

    globals: tuple[str, ...] = ()
    deps: tuple[str, ...] = ()
    mocks: tuple[str, ...] = ()
    tests: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UnitConfig:
        return cls(
            globals=_as_patterns(data.get("globals")),
            deps=_as_patterns(data.get("deps")),
            mocks=_as_patterns(data.get("mocks")),
            tests=_as_patterns(data.get("tests")),
        )


@dataclass(frozen=True)
class ProjectConfig:
    """Configuration of one project.

    ``type`` keeps whatever the project declared (None when absent) so
    unsupported values can be reported by name.
    """

    id: str
    type: str | None = None
    src: tuple[str, ...] = ()
    alljs: tuple[str, ...] | None = None
    unit: UnitConfig | None = None
    root: str = "."

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProjectConfig:
        unit = data.get("unit")
        alljs = data.get("alljs")
        return cls(
            id=str(data.get("id", "")),
            type=data.get("type"),
            src=_as_patterns(data.get("src")),
            alljs=_as_patterns(alljs) if alljs is not None else None,
            unit=UnitConfig.from_dict(unit) if isinstance(unit, Mapping) else None,
            root=str(data.get("root", ".")),
        )

    @property
    def effective_type(self) -> str:
        """Declared project type, defaulting to web when absent."""
        return self.type or DEFAULT_PROJECT_TYPE
