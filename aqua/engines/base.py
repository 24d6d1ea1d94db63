"""Base class and shared types for engines.

Every engine is a pipeline Transform: it is built from an options mapping,
consumes a FileStream in ``process`` and either returns the downstream
stream or raises StageError.
"""

import asyncio
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aqua.pipeline.structures import FileStream, StageError
from aqua.utils.constants import DEFAULT_COMMAND_TIMEOUT, ENV_COMMAND_TIMEOUT
from aqua.utils.logging import logger
from aqua.utils.toolbox import Toolbox

COMMAND_TIMEOUT = int(os.environ.get(ENV_COMMAND_TIMEOUT, DEFAULT_COMMAND_TIMEOUT))

# Lines of tool output kept on a StageError
MAX_DETAIL_LINES = 40


@dataclass
class Finding:
    """A single lint result."""

    tool: str
    file: str
    line: int
    column: int
    rule: str
    message: str
    severity: str


def tail(text: str, lines: int = MAX_DETAIL_LINES) -> str:
    """Last lines of tool output, for error details."""
    split = text.strip().splitlines()
    if len(split) <= lines:
        return "\n".join(split)
    return "\n".join(["...", *split[-lines:]])


class BaseEngine(ABC):
    """Shared plumbing for engines that drive external tools."""

    def __init__(
        self,
        toolbox_factory: type[Toolbox] | None = None,
        options: Mapping[str, Any] | None = None,
        timeout: int = COMMAND_TIMEOUT,
    ):
        self._toolbox_factory = toolbox_factory or Toolbox
        self.options: dict[str, Any] = dict(options or {})
        self.timeout = timeout

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name used in logs and errors."""

    @abstractmethod
    async def process(self, stream: FileStream) -> FileStream:
        """Consume the stream."""

    def toolbox(self, root: Path) -> Toolbox:
        return self._toolbox_factory(root)

    def _tool(self, root: Path, tool: str) -> list[str]:
        """Command prefix for a JS tool; a missing tool fails the stage."""
        try:
            return self.toolbox(root).get_tool(tool)
        except (FileNotFoundError, ValueError) as e:
            raise StageError(str(e), stage=self.name) from e

    def _resolve(self, stream: FileStream, path: str | Path) -> Path:
        p = Path(path)
        return p if p.is_absolute() else stream.cwd / p

    async def _run_command(
        self,
        cmd: list[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> tuple[int, str, str]:
        """Execute a command with asyncio pipes.

        Returns:
            (returncode, stdout, stderr)

        Raises:
            StageError: On timeout or when the executable cannot be started
        """
        start_time = time.perf_counter()
        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)

        logger.debug(f"[{self.name}] {' '.join(cmd)} (cwd={cwd})")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd),
                env=full_env,
            )
        except OSError as e:
            raise StageError(f"{self.name}: cannot start {cmd[0]}: {e}", stage=self.name) from e

        try:
            stdout_data, stderr_data = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise StageError(
                f"{self.name} timed out after {self.timeout}s", stage=self.name
            ) from e

        elapsed = time.perf_counter() - start_time
        logger.debug(f"[{self.name}] exit {process.returncode} in {elapsed:.2f}s")

        return (
            process.returncode,
            stdout_data.decode("utf-8", errors="replace"),
            stderr_data.decode("utf-8", errors="replace"),
        )

    def _normalize_path(self, path: str, root: Path) -> str:
        """Normalize path to forward slashes and make relative to project root."""
        path = path.replace("\\", "/")

        try:
            abs_path = Path(path)
            if abs_path.is_absolute():
                return abs_path.relative_to(root).as_posix()
        except ValueError:
            pass

        return path
