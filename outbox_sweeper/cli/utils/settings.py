"""Settings loading for CLI commands."""

import sys

from outbox_sweeper.cli.utils.formatters import error
from outbox_sweeper.core.exceptions import ConfigurationError
from outbox_sweeper.core.settings import Settings, get_settings


def load_settings_or_exit() -> Settings:
    """Load settings, printing the problem and exiting with status 1 if invalid."""
    try:
        return get_settings()
    except ConfigurationError as e:
        error(e.message)
        sys.exit(1)
