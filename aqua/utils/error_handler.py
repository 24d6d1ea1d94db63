"""Error handling for AQUA commands.

Click errors pass through untouched. Configuration errors become a
ConfigLoadError (exit code CONFIG_ERROR). Anything else is logged, appended
with its traceback to .aqua/error.log and surfaced as a ClickException.
"""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from aqua.config import ConfigError
from aqua.utils.logging import logger

from .constants import AQUA_DIR, ERROR_LOG_FILE
from .exit_codes import ExitCodes


class ConfigLoadError(click.ClickException):
    """Configuration could not be loaded."""

    exit_code = ExitCodes.CONFIG_ERROR


def append_error_log(command: str, exc: BaseException) -> None:
    """Append a traceback entry for a failed command to ERROR_LOG_FILE."""
    AQUA_DIR.mkdir(parents=True, exist_ok=True)
    rule = "=" * 80
    with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
        f.write(f"\n{rule}\n")
        f.write(f"[{datetime.now().isoformat()}] Error in command: {command}\n")
        f.write(f"{rule}\n")
        f.write(f"{type(exc).__name__}: {exc}\n\n")
        f.write("".join(traceback.format_exception(exc)))
        f.write(f"{rule}\n\n")


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a click command so failures end with a readable message."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit):
            raise
        except ConfigError as e:
            logger.debug(f"Configuration error in '{func.__name__}': {e}")
            raise ConfigLoadError(str(e)) from e
        except Exception as e:
            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=str(e),
            )
            append_error_log(func.__name__, e)
            raise click.ClickException(
                f"{type(e).__name__}: {e}\n\nFull traceback logged to: {ERROR_LOG_FILE}"
            ) from e

    return wrapper
