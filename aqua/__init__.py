"""AQUA - code quality tasks for JavaScript projects."""

__version__ = "1.0.0"

from aqua.core import Aqua  # noqa: E402
from aqua.runner import TaskRunner  # noqa: E402

__all__ = ["Aqua", "TaskRunner", "__version__"]
