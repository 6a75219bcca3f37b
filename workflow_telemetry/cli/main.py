"""workflow_telemetry CLI"""

import click

from workflow_telemetry import __version__
from workflow_telemetry.cli.report import report

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="Workflow Telemetry CLI")
@click.pass_context
def cli(ctx):
    """
    Workflow Telemetry Command Line Interface (CLI).
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(report))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
