"""AQUA tasks.

Every task follows the same lifecycle (see base.BaseTask). TASKS maps the
registry key to the task class; Aqua instantiates each one per run.
"""

from .base import BaseTask
from .lint import LintTask
from .unit import UnitTask

TASKS: dict[str, type[BaseTask]] = {
    LintTask.name: LintTask,
    UnitTask.name: UnitTask,
}

__all__ = ["TASKS", "BaseTask", "LintTask", "UnitTask"]
