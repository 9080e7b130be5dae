"""Configuration commands."""

import json
import sys

import click

from outbox_sweeper.cli.utils import error, key_values
from outbox_sweeper.cli.utils.settings import load_settings_or_exit


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""


@config.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
def show(output_format: str) -> None:
    """Display the effective settings with the database password masked."""
    settings = load_settings_or_exit()
    data = settings.to_safe_dict()

    if output_format == "json":
        click.echo(json.dumps(data, indent=2, default=str))
        return

    for section, values in data.items():
        click.echo(f"\n[{section.upper()}]")
        key_values(values)


@config.command()
def validate() -> None:
    """Check that all required settings are present and valid."""
    settings = load_settings_or_exit()
    if settings.db.is_postgres:
        click.echo(f"Database: {settings.db.masked_url}")
    else:
        error(f"Database {settings.db.masked_url} is not PostgreSQL; row locking is unavailable")
        sys.exit(1)
    click.echo(f"AWS region: {settings.aws.region}")
    click.echo("Configuration is valid")
