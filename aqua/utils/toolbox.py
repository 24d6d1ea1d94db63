"""Centralized tool path management for the Node.js toolchain.

Engines never build binary paths themselves; they ask the Toolbox. Lookup
order for every tool:
1. <project root>/node_modules/.bin (the project's own pinned version)
2. System PATH
"""

import platform
import shutil
from pathlib import Path

IS_WINDOWS = platform.system() == "Windows"


class Toolbox:
    """Locates the JS tools (eslint, nyc, jasmine, karma) a project runs."""

    def __init__(self, project_root: Path):
        """Initialize with project root directory.

        Args:
            project_root: Path to project root (where node_modules lives)

        Raises:
            ValueError: If project_root doesn't exist or isn't a directory
        """
        self.root = Path(project_root).resolve()

        if not self.root.exists():
            raise ValueError(f"Project root does not exist: {self.root}")
        if not self.root.is_dir():
            raise ValueError(f"Project root is not a directory: {self.root}")

        self.node_bin = self.root / "node_modules" / ".bin"

    def get_tool(self, name: str, required: bool = True) -> list[str] | None:
        """Get the command prefix that runs a JS tool.

        Args:
            name: Binary name as published in node_modules/.bin (e.g. 'eslint', 'nyc')
            required: If True, raise FileNotFoundError when missing

        Returns:
            Command components, or None if not required and not found

        Raises:
            FileNotFoundError: If required=True and the tool is nowhere to be found
        """
        local = self.node_bin / (f"{name}.cmd" if IS_WINDOWS else name)
        if local.exists():
            return [str(local)]

        system_tool = shutil.which(name)
        if system_tool:
            return [system_tool]

        if required:
            raise FileNotFoundError(
                f"{name} not found at {local} or in system PATH. "
                f"Run 'npm install --save-dev {name}' in {self.root}."
            )

        return None
