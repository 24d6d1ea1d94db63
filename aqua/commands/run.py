"""Run registered tasks."""

import asyncio
import sys

import click

from aqua.pipeline.ui import (
    console,
    print_error,
    print_header,
    print_success,
    print_task_results,
    print_warning,
)
from aqua.utils.error_handler import handle_exceptions
from aqua.utils.exit_codes import ExitCodes

from ._context import load_context


@click.command("run")
@handle_exceptions
@click.argument("task_names", nargs=-1, required=True)
@click.pass_context
def run(ctx: click.Context, task_names: tuple[str, ...]) -> None:
    """Run one or more tasks concurrently.

    Task names are namespaced per project: <project id>-<task>.

    \b
    EXAMPLES:
      aqua run app-test-unit          # Unit tests for project "app"
      aqua run app-lint app-test-unit # Lint and unit tests together
    """
    _aqua, runner, reporter = load_context(ctx.obj)

    unknown = [name for name in task_names if name not in runner.tasks]
    if unknown:
        print_error(f"Unknown task(s): {', '.join(unknown)}")
        console.print("Run [task]aqua list[/task] to see the registered tasks.")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    print_header("AQUA")
    results = asyncio.run(runner.run_tasks(task_names))
    print_task_results(results)

    exit_code = ExitCodes.SUCCESS
    if reporter.failed or not all(r.success for r in results):
        exit_code = ExitCodes.STAGE_FAILED

    if ExitCodes.should_fail_pipeline(exit_code):
        print_warning(f"{reporter.error_count} error(s) reported: {ExitCodes.get_description(exit_code)}")
        sys.exit(exit_code)

    print_success(f"{len(results)} task(s) passed")
