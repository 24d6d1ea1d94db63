"""Coverage threshold enforcement.

Reads the istanbul reports written for a project (``coverage-summary.json``,
or ``coverage-final.json`` when no summary exists) and compares the totals
against the configured minimum percentages.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from aqua.pipeline.structures import FileStream, StageError, ThresholdError
from aqua.utils.constants import COVERAGE_DIMENSIONS, COVERAGE_FINAL_FILE, COVERAGE_SUMMARY_FILE
from aqua.utils.logging import logger

from .base import BaseEngine


def _pct(covered: int, total: int) -> float:
    if total == 0:
        return 100.0
    return round(100.0 * covered / total, 2)


def totals_from_summary(summary: Mapping[str, Any]) -> dict[str, float]:
    """Percentages from a json-summary report ("Unknown" means nothing to cover)."""
    total = summary.get("total") or {}
    result = {}
    for dim in COVERAGE_DIMENSIONS:
        pct = (total.get(dim) or {}).get("pct", 100)
        result[dim] = float(pct) if isinstance(pct, (int, float)) else 100.0
    return result


def totals_from_coverage_map(coverage: Mapping[str, Any]) -> dict[str, float]:
    """Percentages computed from a raw istanbul coverage map."""
    counts = {dim: [0, 0] for dim in COVERAGE_DIMENSIONS}

    for file_cov in coverage.values():
        statements = file_cov.get("s") or {}
        counts["statements"][0] += sum(1 for c in statements.values() if c > 0)
        counts["statements"][1] += len(statements)

        functions = file_cov.get("f") or {}
        counts["functions"][0] += sum(1 for c in functions.values() if c > 0)
        counts["functions"][1] += len(functions)

        for branch in (file_cov.get("b") or {}).values():
            counts["branches"][0] += sum(1 for c in branch if c > 0)
            counts["branches"][1] += len(branch)

        # Line coverage: a line is covered when any statement starting on it ran
        lines: dict[int, int] = {}
        statement_map = file_cov.get("statementMap") or {}
        for sid, count in statements.items():
            loc = statement_map.get(sid)
            if not loc:
                continue
            line = loc["start"]["line"]
            lines[line] = max(lines.get(line, 0), count)
        counts["lines"][0] += sum(1 for c in lines.values() if c > 0)
        counts["lines"][1] += len(lines)

    return {dim: _pct(covered, total) for dim, (covered, total) in counts.items()}


def read_totals(root_directory: Path) -> dict[str, float]:
    """Load coverage totals from a report directory.

    Raises:
        StageError: If the directory holds no readable istanbul report
    """
    summary = root_directory / COVERAGE_SUMMARY_FILE
    candidates = [summary] if summary.exists() else sorted(root_directory.rglob(COVERAGE_SUMMARY_FILE))
    if candidates:
        return totals_from_summary(_load(candidates[0]))

    final = sorted(root_directory.rglob(COVERAGE_FINAL_FILE))
    if final:
        merged: dict[str, Any] = {}
        for path in final:
            merged.update(_load(path))
        return totals_from_coverage_map(merged)

    raise StageError(f"no coverage report found in {root_directory}", stage="threshold-enforcer")


def _load(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StageError(f"cannot read coverage report {path}: {e}", stage="threshold-enforcer") from e


def check_thresholds(
    totals: Mapping[str, float], thresholds: Mapping[str, float]
) -> dict[str, tuple[float, float]]:
    """Return {dimension: (actual, minimum)} for every dimension below its minimum."""
    violations = {}
    for dim, minimum in thresholds.items():
        if dim not in totals:
            logger.warning(f"Unknown coverage dimension in thresholds: {dim}")
            continue
        if totals[dim] < float(minimum):
            violations[dim] = (totals[dim], float(minimum))
    return violations


class ThresholdEnforcer(BaseEngine):
    """Fails the stage when coverage is below the configured thresholds.

    Options:
        thresholds: {dimension: minimum percentage}
        root_directory: Report directory for the project
    """

    @property
    def name(self) -> str:
        return "threshold-enforcer"

    async def process(self, stream: FileStream) -> FileStream:
        root_directory = self._resolve(stream, self.options["root_directory"])
        thresholds = self.options.get("thresholds") or {}

        totals = read_totals(root_directory)
        logger.info(
            f"[{self.name}] "
            + ", ".join(f"{dim} {totals[dim]:.2f}%" for dim in COVERAGE_DIMENSIONS)
        )

        violations = check_thresholds(totals, thresholds)
        if violations:
            detail = "; ".join(
                f"{dim} {actual:.2f}% < {minimum:.2f}%" for dim, (actual, minimum) in violations.items()
            )
            raise ThresholdError(f"Coverage below minimum thresholds: {detail}", violations)

        return stream.derive(coverage_totals=totals)
