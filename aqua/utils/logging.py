"""Centralized logging configuration using Loguru.

Every module logs through the same preconfigured logger:

Usage:
    from aqua.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if AQUA_LOG_LEVEL=DEBUG

Environment Variables:
    AQUA_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    AQUA_LOG_JSON: 0|1 (default: 0, human-readable)
    AQUA_LOG_FILE: path to log file (optional, always NDJSON)
"""

import json
import os
import sys

from loguru import logger

# Remove default handler
logger.remove()

_log_level = os.environ.get("AQUA_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("AQUA_LOG_JSON", "0") == "1"
_log_file = os.environ.get("AQUA_LOG_FILE")


def _to_ndjson(record) -> str:
    """Render a loguru record as a single JSON line."""
    entry = {
        "level": record["level"].name,
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "module": record["name"],
    }

    for key, value in record["extra"].items():
        entry[key] = value

    if record["exception"]:
        entry["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }

    return json.dumps(entry, default=str)


def ndjson_sink(message):
    """Write log records to stdout as NDJSON."""
    # Never call logger.* inside a sink - causes infinite recursion
    sys.stdout.write(_to_ndjson(message.record) + "\n")
    sys.stdout.flush()


# Human-readable format (no emojis - Windows CP1252 compatibility)
_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

_console_handler_id: int | None = None


def _add_console_handler(level: str, colorize: bool | None = None) -> int:
    if _json_mode:
        return logger.add(ndjson_sink, level=level, colorize=False)
    return logger.add(
        sys.stderr,
        level=level,
        format=_human_format,
        colorize=colorize,  # None: colors if TTY, plain if piped
    )


_console_handler_id = _add_console_handler(_log_level)

if _log_file:
    def _file_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_to_ndjson(message.record) + "\n")

    logger.add(_file_sink, level="DEBUG")


def set_level(level: str, colors: bool | None = None) -> None:
    """Re-apply the console level once the global configuration is known.

    The AQUA_LOG_LEVEL environment variable still wins when it is set.

    Args:
        level: Level name from ``logging.level`` (e.g. "info", "DEBUG")
        colors: False forces plain output, None keeps TTY auto-detection
    """
    global _console_handler_id, _log_level

    if "AQUA_LOG_LEVEL" in os.environ:
        return

    _log_level = str(level).upper()
    if _console_handler_id is not None:
        try:
            logger.remove(_console_handler_id)
        except ValueError:
            pass  # Already removed
        _console_handler_id = None
    if _log_level == "OFF":
        return
    _console_handler_id = _add_console_handler(_log_level, colorize=None if colors else False)


__all__ = [
    "logger",
    "set_level",
]
