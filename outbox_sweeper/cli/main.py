"""Main CLI entry point for outbox-sweeper."""

import sys

import click

from outbox_sweeper import __version__
from outbox_sweeper.cli.commands import config, sweeper
from outbox_sweeper.cli.utils import error
from outbox_sweeper.core.exceptions import ConfigurationError
from outbox_sweeper.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="outbox-sweeper")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Outbox Sweeper - deliver transactional outbox messages to SQS and SNS.

    \b
    Commands:
      run        Run the liveness server and sweep periodically
      sweep      Run one sweep and print the outcome
      pending    Show pending messages per topic
      config     Show or validate configuration

    \b
    Required environment:
      DATABASE_URL   PostgreSQL connection string
      AWS_REGION     Region of the SQS queues and SNS topics
    """
    ctx.ensure_object(dict)


cli.add_command(sweeper.run)
cli.add_command(sweeper.sweep)
cli.add_command(sweeper.pending)
cli.add_command(config.config)


def main() -> None:
    """Entry point for CLI."""
    try:
        setup_logging()
    except ConfigurationError as e:
        error(e.message)
        sys.exit(1)
    cli(obj={})


if __name__ == "__main__":
    main()
