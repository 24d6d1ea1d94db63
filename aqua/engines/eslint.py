"""ESLint engine and lint reporters.

ESLint handles its own parallelism, so every file in the stream goes into a
single invocation. Findings travel downstream in ``stream.context["findings"]``.
"""

import json

from rich.table import Table

from aqua.pipeline.structures import FileStream, StageError
from aqua.utils.logging import logger

from .base import BaseEngine, Finding, tail

ESLINT_SEVERITY_ERROR = 2

# ESLint exit codes: 0 clean, 1 lint errors, 2 configuration/crash
ESLINT_FATAL_EXIT = 2


class EslintLinter(BaseEngine):
    """Runs ESLint with JSON output and parses findings.

    Options:
        config: Path to an ESLint config file (optional, project config otherwise)
    """

    @property
    def name(self) -> str:
        return "eslint"

    async def process(self, stream: FileStream) -> FileStream:
        if not stream.files:
            logger.debug(f"[{self.name}] No files to lint")
            return stream.derive(findings=[])

        cmd = [*self._tool(stream.cwd, "eslint"), "--format", "json"]
        if self.options.get("config"):
            cmd += ["--config", str(self._resolve(stream, self.options["config"]))]
        cmd += stream.files

        returncode, stdout, stderr = await self._run_command(cmd, cwd=stream.cwd)

        if returncode >= ESLINT_FATAL_EXIT:
            raise StageError(
                f"{self.name} failed (exit code {returncode})",
                stage=self.name,
                details=tail(stderr or stdout),
            )

        findings = self.parse_output(stdout, stream)
        logger.info(f"[{self.name}] Found {len(findings)} issues in {len(stream.files)} files")
        return stream.derive(findings=findings)

    def parse_output(self, stdout: str, stream: FileStream) -> list[Finding]:
        """Parse ESLint JSON output into findings."""
        if not stdout.strip():
            return []

        try:
            results = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise StageError(f"{self.name} produced invalid JSON: {e}", stage=self.name) from e

        findings = []
        for file_result in results:
            file_path = file_result.get("filePath", "")

            for msg in file_result.get("messages", []):
                findings.append(
                    Finding(
                        tool=self.name,
                        file=self._normalize_path(file_path, stream.cwd),
                        line=max(0, msg.get("line") or 0),
                        column=max(0, msg.get("column") or 0),
                        rule=msg.get("ruleId") or "eslint-error",
                        message=msg.get("message", ""),
                        severity="error"
                        if msg.get("severity") == ESLINT_SEVERITY_ERROR
                        else "warning",
                    )
                )
        return findings


class LintReporter(BaseEngine):
    """Reports findings carried by the stream.

    Options:
        format: "default" prints a findings table; "fail" raises StageError
            when any finding has error severity.
    """

    @property
    def name(self) -> str:
        return f"lint-reporter:{self.options.get('format', 'default')}"

    async def process(self, stream: FileStream) -> FileStream:
        findings: list[Finding] = stream.context.get("findings", [])
        fmt = self.options.get("format", "default")

        if fmt == "fail":
            errors = [f for f in findings if f.severity == "error"]
            if errors:
                raise StageError(
                    f"{len(errors)} lint error(s) found",
                    stage=self.name,
                )
            return stream

        if findings:
            self._print_table(findings)
        return stream

    def _print_table(self, findings: list[Finding]) -> None:
        from aqua.pipeline.ui import console

        table = Table(title="Lint Findings", expand=False)
        table.add_column("Location", style="path", no_wrap=True)
        table.add_column("Severity", width=8)
        table.add_column("Rule", style="dim")
        table.add_column("Message")

        for f in sorted(findings, key=lambda f: (f.file, f.line, f.rule)):
            style = "error" if f.severity == "error" else "warning"
            table.add_row(
                f"{f.file}:{f.line}:{f.column}",
                f"[{style}]{f.severity}[/{style}]",
                f.rule,
                f.message,
            )
        console.print(table)
