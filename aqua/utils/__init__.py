"""AQUA utilities package."""

from .constants import (
    AQUA_DIR,
    COVERAGE_DIMENSIONS,
    DEFAULT_CONFIG_FILE,
    ERROR_LOG_FILE,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import logger
from .toolbox import Toolbox

__all__ = [
    "AQUA_DIR",
    "COVERAGE_DIMENSIONS",
    "DEFAULT_CONFIG_FILE",
    "ERROR_LOG_FILE",
    "handle_exceptions",
    "ExitCodes",
    "logger",
    "Toolbox",
]
