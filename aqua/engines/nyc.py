"""Coverage instrumentation and report writing through nyc (istanbul).

Instrumented copies of the sources are written to a per-project work
directory. The coverage hook helper (resources/coverage_hook.js) serves
them in place of the originals while tests run, then dumps the collected
coverage object where ``nyc report`` reads it.
"""

from pathlib import Path

from aqua.pipeline.structures import FileStream, StageError
from aqua.utils.logging import logger

from .base import BaseEngine, tail

# Reporter the threshold enforcer reads; always written
SUMMARY_REPORTER = "json-summary"


class NycInstrumenter(BaseEngine):
    """Instruments every file in the stream.

    Options:
        work_dir: Per-project scratch directory (relative to the stream cwd)
    """

    @property
    def name(self) -> str:
        return "nyc-instrument"

    async def process(self, stream: FileStream) -> FileStream:
        work_dir = self._resolve(stream, self.options.get("work_dir", ".aqua/work"))
        out_dir = work_dir / "instrumented"

        if not stream.files:
            logger.warning(f"[{self.name}] No source files matched {stream.patterns}")
        else:
            cmd = [*self._tool(stream.cwd, "nyc"), "instrument", ".", str(out_dir), "--delete"]
            for f in stream.files:
                cmd += ["--include", f]

            returncode, stdout, stderr = await self._run_command(cmd, cwd=stream.cwd)
            if returncode != 0:
                raise StageError(
                    f"instrumentation failed (exit code {returncode})",
                    stage=self.name,
                    details=tail(stderr or stdout),
                )
            logger.info(f"[{self.name}] Instrumented {len(stream.files)} files into {out_dir}")

        return stream.derive(work_dir=str(work_dir), instrumented_dir=str(out_dir))


class NycReportWriter(BaseEngine):
    """Writes coverage reports from the raw coverage collected by the test run.

    Options:
        dir: Report output directory (relative to the stream cwd)
        reporters: istanbul reporter names
    """

    @property
    def name(self) -> str:
        return "nyc-report"

    def reporters(self) -> list[str]:
        reporters = list(self.options.get("reporters") or [])
        if SUMMARY_REPORTER not in reporters:
            reporters.append(SUMMARY_REPORTER)
        return reporters

    async def process(self, stream: FileStream) -> FileStream:
        temp_dir = stream.context.get("coverage_temp_dir")
        if not temp_dir or not any(Path(temp_dir).glob("*.json")):
            raise StageError("no coverage data was collected", stage=self.name)

        report_dir = self._resolve(stream, self.options["dir"])
        cmd = [
            *self._tool(stream.cwd, "nyc"),
            "report",
            "--temp-dir",
            str(temp_dir),
            "--report-dir",
            str(report_dir),
        ]
        for reporter in self.reporters():
            cmd += ["--reporter", reporter]

        returncode, stdout, stderr = await self._run_command(cmd, cwd=stream.cwd)
        if returncode != 0:
            raise StageError(
                f"writing coverage reports failed (exit code {returncode})",
                stage=self.name,
                details=tail(stderr or stdout),
            )

        if stdout.strip():
            logger.info(f"[{self.name}] {stdout.strip()}")
        logger.info(f"[{self.name}] Reports written to {report_dir}")
        return stream.derive(report_dir=str(report_dir))
