"""Karma engine: runs browser unit tests in a single pass."""

import json

from aqua.pipeline.structures import FileStream, StageError
from aqua.utils.logging import logger

from .base import BaseEngine, tail

# Python/loguru level names -> karma LOG_* constants
KARMA_LOG_LEVELS = {
    "TRACE": "DEBUG",
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "SUCCESS": "INFO",
    "WARNING": "WARN",
    "WARN": "WARN",
    "ERROR": "ERROR",
    "CRITICAL": "ERROR",
    "OFF": "OFF",
}

KARMA_CONFIG_TEMPLATE = """// generated by aqua - do not edit
module.exports = function (config) {{
  config.set({settings});
}};
"""


class KarmaRunner(BaseEngine):
    """Generates a karma config for the stream's files and runs it once.

    Options:
        log_level, colors: Console settings
        browsers, frameworks, reporters: Karma settings
        preprocessors, coverage_reporter: Present when coverage is enabled
        work_dir: Where the generated karma.conf.cjs is written
    """

    @property
    def name(self) -> str:
        return "karma"

    def build_settings(self, stream: FileStream) -> dict:
        level = str(self.options.get("log_level", "INFO")).upper()
        settings = {
            "basePath": str(stream.cwd),
            "files": list(stream.files),
            "frameworks": list(self.options.get("frameworks", ["jasmine"])),
            "browsers": list(self.options.get("browsers", ["ChromeHeadless"])),
            "reporters": list(self.options.get("reporters", ["progress"])),
            "logLevel": KARMA_LOG_LEVELS.get(level, "INFO"),
            "colors": bool(self.options.get("colors", True)),
            "singleRun": True,
            "autoWatch": False,
        }
        if self.options.get("preprocessors"):
            settings["preprocessors"] = dict(self.options["preprocessors"])
        if self.options.get("coverage_reporter"):
            settings["coverageReporter"] = dict(self.options["coverage_reporter"])
        return settings

    async def process(self, stream: FileStream) -> FileStream:
        work_dir = self._resolve(stream, self.options.get("work_dir", ".aqua/work"))
        work_dir.mkdir(parents=True, exist_ok=True)
        config_path = work_dir / "karma.conf.cjs"

        settings = json.dumps(self.build_settings(stream), indent=2)
        config_path.write_text(KARMA_CONFIG_TEMPLATE.format(settings=settings), encoding="utf-8")

        cmd = [*self._tool(stream.cwd, "karma"), "start", str(config_path), "--single-run"]
        returncode, stdout, stderr = await self._run_command(cmd, cwd=stream.cwd)

        if stdout.strip():
            from aqua.pipeline.ui import console

            console.print(stdout.rstrip(), markup=False, highlight=False)

        if returncode != 0:
            raise StageError(
                f"browser unit tests failed (exit code {returncode})",
                stage=self.name,
                details=tail(stderr or stdout),
            )

        logger.info(f"[{self.name}] {len(stream.files)} files loaded, all specs passed")
        return stream.derive()
