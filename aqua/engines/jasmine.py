"""Jasmine engine: runs node unit tests against instrumented sources."""

import json
import os
import shutil
from importlib import resources
from pathlib import Path

from aqua.pipeline.structures import FileStream, StageError
from aqua.utils.logging import logger

from .base import BaseEngine, tail

COVERAGE_HOOK = "coverage_hook.js"

# Keys consumed here rather than passed into jasmine.json
RUNNER_OPTIONS = {"show_colors", "work_dir"}


class JasmineRunner(BaseEngine):
    """Runs the stream's files, in order, as one jasmine suite.

    Options:
        show_colors: Colored reporter output
        work_dir: Per-project scratch directory shared with the instrumenter
        any other key: copied into the generated jasmine.json
    """

    @property
    def name(self) -> str:
        return "jasmine"

    def _local_path(self, path: str, stream: FileStream, helpers_dir: Path) -> str:
        """Path relative to the cwd; files outside the project are copied in."""
        p = Path(path)
        if not p.is_absolute():
            return p.as_posix()
        try:
            return p.relative_to(stream.cwd).as_posix()
        except ValueError:
            helpers_dir.mkdir(parents=True, exist_ok=True)
            target = helpers_dir / p.name
            shutil.copyfile(p, target)
            return target.relative_to(stream.cwd).as_posix()

    def build_config(self, stream: FileStream, work_dir: Path) -> dict:
        """Generate the jasmine.json content for this run."""
        helpers_dir = work_dir / "helpers"
        hook = resources.files("aqua.resources").joinpath(COVERAGE_HOOK)
        with resources.as_file(hook) as hook_path:
            hook_file = self._local_path(str(hook_path), stream, helpers_dir)

        config = {k: v for k, v in self.options.items() if k not in RUNNER_OPTIONS}
        config.update(
            {
                "spec_dir": "",
                "spec_files": [self._local_path(f, stream, helpers_dir) for f in stream.files],
                "helpers": [hook_file],
            }
        )
        return config

    async def process(self, stream: FileStream) -> FileStream:
        work_dir = self._resolve(stream, self.options.get("work_dir", ".aqua/work"))
        work_dir.mkdir(parents=True, exist_ok=True)
        instrumented_dir = work_dir / "instrumented"
        temp_dir = work_dir / ".nyc_output"

        # Stale coverage from an earlier run must not leak into this report
        if temp_dir.exists():
            shutil.rmtree(temp_dir)

        config_path = work_dir / "jasmine.json"
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.build_config(stream, work_dir), f, indent=2)

        cmd = [
            *self._tool(stream.cwd, "jasmine"),
            f"--config={os.path.relpath(config_path, stream.cwd)}",
            "--color" if self.options.get("show_colors", True) else "--no-color",
        ]
        env = {
            "AQUA_SOURCE_ROOT": str(stream.cwd),
            "AQUA_INSTRUMENTED_DIR": str(instrumented_dir),
            "AQUA_COVERAGE_FILE": str(temp_dir / "coverage.json"),
        }

        returncode, stdout, stderr = await self._run_command(cmd, cwd=stream.cwd, env=env)

        if stdout.strip():
            from aqua.pipeline.ui import console

            console.print(stdout.rstrip(), markup=False, highlight=False)

        if returncode != 0:
            raise StageError(
                f"unit tests failed (exit code {returncode})",
                stage=self.name,
                details=tail(stderr or stdout),
            )

        logger.info(f"[{self.name}] {len(stream.files)} files loaded, all specs passed")
        return stream.derive(coverage_temp_dir=str(temp_dir))
