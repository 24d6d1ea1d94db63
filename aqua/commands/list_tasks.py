"""List registered tasks."""

import click

from aqua.pipeline.ui import print_task_list, print_warning
from aqua.utils.error_handler import handle_exceptions

from ._context import load_context


@click.command("list")
@handle_exceptions
@click.pass_context
def list_tasks(ctx: click.Context) -> None:
    """Show every registered task and how to run it."""
    _aqua, runner, _reporter = load_context(ctx.obj)

    if not runner.tasks:
        print_warning("No tasks registered.")
        return

    print_task_list({name: task.about for name, task in runner.tasks.items()})
