"""Pipeline execution infrastructure."""
from .stream import file_stream, pipe, resolve_patterns
from .structures import FileStream, StageError, TaskResult, TaskStatus, ThresholdError, Transform
from .ui import (
    console,
    print_error,
    print_header,
    print_success,
    print_task_list,
    print_task_results,
    print_warning,
)

__all__ = [
    "FileStream", "StageError", "ThresholdError", "Transform", "TaskResult", "TaskStatus",
    "file_stream", "pipe", "resolve_patterns",
    "console", "print_header", "print_error", "print_warning", "print_success",
    "print_task_results", "print_task_list",
]
