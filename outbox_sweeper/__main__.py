"""Allow ``python -m outbox_sweeper``."""

from outbox_sweeper.cli.main import main

main()
