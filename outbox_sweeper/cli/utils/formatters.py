"""Output formatting utilities for CLI commands."""

import click


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    """Print a warning message in yellow."""
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    """Print an info message in blue."""
    click.secho(f"ℹ {message}", fg="blue")


def key_values(rows: dict[str, object], *, indent: int = 2, width: int = 30) -> None:
    """Print aligned ``key = value`` lines."""
    pad = " " * indent
    for key, value in rows.items():
        click.echo(f"{pad}{key:{width}} = {value}")
