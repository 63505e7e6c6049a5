"""CLI entry point for prsentry.

Commands:
  publish  — publish an analysis report on a pull request
  init     — write a starter .prsentry.yml and CI workflow
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prsentry_cli.commands.init import init_cmd
from prsentry_cli.commands.publish import publish_cmd


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # PyGithub logs every request at DEBUG
    logging.getLogger("github").setLevel(logging.INFO)


@click.group()
@click.version_option(package_name="prsentry", prog_name="prsentry")
@click.option(
    "--config",
    "config_path",
    default=".prsentry.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRSENTRY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output, including error stack traces.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Publish static-analysis results on GitHub pull requests."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(publish_cmd)
main.add_command(init_cmd)
