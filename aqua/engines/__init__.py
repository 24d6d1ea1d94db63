"""Engines package - the capabilities tasks drive.

This package provides:
- EngineProvider: the capability interface tasks are constructed with
- NodeEngines: default provider backed by the Node.js toolchain
- BaseEngine / Finding: shared engine plumbing and lint result type
- Individual engine classes
"""

from collections.abc import Mapping
from typing import Any, Protocol

from aqua.pipeline.structures import Transform

from .base import BaseEngine, Finding
from .enforcer import ThresholdEnforcer
from .eslint import EslintLinter, LintReporter
from .jasmine import JasmineRunner
from .karma import KarmaRunner
from .nyc import NycInstrumenter, NycReportWriter

Options = Mapping[str, Any]


class EngineProvider(Protocol):
    """One factory per engine; each returns a pipe-compatible Transform."""

    def linter(self, options: Options) -> Transform: ...

    def lint_reporter(self, options: Options) -> Transform: ...

    def instrumenter(self, options: Options) -> Transform: ...

    def node_test_runner(self, options: Options) -> Transform: ...

    def browser_test_runner(self, options: Options) -> Transform: ...

    def report_writer(self, options: Options) -> Transform: ...

    def threshold_enforcer(self, options: Options) -> Transform: ...


class NodeEngines:
    """Default EngineProvider: ESLint, nyc, Jasmine, Karma and the built-in enforcer."""

    def linter(self, options: Options) -> Transform:
        return EslintLinter(options=options)

    def lint_reporter(self, options: Options) -> Transform:
        return LintReporter(options=options)

    def instrumenter(self, options: Options) -> Transform:
        return NycInstrumenter(options=options)

    def node_test_runner(self, options: Options) -> Transform:
        return JasmineRunner(options=options)

    def browser_test_runner(self, options: Options) -> Transform:
        return KarmaRunner(options=options)

    def report_writer(self, options: Options) -> Transform:
        return NycReportWriter(options=options)

    def threshold_enforcer(self, options: Options) -> Transform:
        return ThresholdEnforcer(options=options)


__all__ = [
    "BaseEngine",
    "EngineProvider",
    "EslintLinter",
    "Finding",
    "JasmineRunner",
    "KarmaRunner",
    "LintReporter",
    "NodeEngines",
    "NycInstrumenter",
    "NycReportWriter",
    "ThresholdEnforcer",
]
