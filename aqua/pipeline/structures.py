"""Data contracts for pipeline execution."""
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol


class StageError(Exception):
    """A pipeline stage failed.

    Raised by engines for tool failures, timeouts and missing tools; the
    calling task forwards it unchanged to the error channel.
    """

    def __init__(self, message: str, stage: str | None = None, details: str = ""):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.details = details


class ThresholdError(StageError):
    """Measured coverage is below a configured minimum."""

    def __init__(self, message: str, violations: dict[str, tuple[float, float]] | None = None):
        super().__init__(message, stage="threshold-enforcer")
        self.violations = violations or {}


@dataclass
class FileStream:
    """An ordered set of files flowing between pipeline stages.

    ``patterns`` are what the stream was opened with, ``files`` what they
    resolved to (in pattern order). ``context`` carries stage outputs that
    are not files (work directories, findings, results).
    """
    patterns: list[str]
    files: list[str]
    cwd: Path
    context: dict[str, Any] = field(default_factory=dict)

    def derive(self, files: list[str] | None = None, **context: Any) -> "FileStream":
        """Return a downstream stream sharing this stream's context."""
        merged = dict(self.context)
        merged.update(context)
        return FileStream(
            patterns=list(self.patterns),
            files=list(self.files if files is None else files),
            cwd=self.cwd,
            context=merged,
        )


class Transform(Protocol):
    """A pipe-compatible engine stage."""

    @property
    def name(self) -> str:
        ...

    async def process(self, stream: FileStream) -> FileStream:
        """Consume the whole stream; return the downstream stream or raise StageError."""
        ...


class TaskStatus(Enum):
    """Status of a task invocation as seen by the host runner."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Result of one registered task invocation (including spawned pipelines)."""
    name: str
    status: TaskStatus
    elapsed: float
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        d = asdict(self)
        d['status'] = self.status.value
        return d

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.SUCCESS
