"""AQUA CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from aqua import __version__
from aqua.utils.constants import DEFAULT_CONFIG_FILE


@click.group()
@click.version_option(version=__version__, prog_name="aqua")
@click.help_option("-h", "--help")
@click.option("--root", default=".", help="Root directory")
@click.option(
    "--config",
    "config_path",
    default=None,
    help=f"Global configuration file, relative to root (default: {DEFAULT_CONFIG_FILE})",
)
@click.option(
    "--project",
    "project_paths",
    multiple=True,
    help="Project configuration file (can be repeated; default: 'projects' in the config file)",
)
@click.option("--quiet", "-q", is_flag=True, help="Only print errors")
@click.pass_context
def cli(ctx, root, config_path, project_paths, quiet):
    """AQUA - JavaScript code quality tasks (unit tests, coverage, lint)

    \b
    QUICK START:
      aqua list                  # Registered tasks per project
      aqua run app-test-unit     # Unit tests + coverage for project "app"
      aqua run app-lint          # Lint project "app"

    \b
    For detailed options: aqua <command> --help"""
    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "root": root,
            "config": config_path,
            "projects": project_paths,
            "quiet": quiet,
        }
    )


from aqua.commands.config import config
from aqua.commands.list_tasks import list_tasks
from aqua.commands.run import run

cli.add_command(run)
cli.add_command(list_tasks)
cli.add_command(config)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
