"""Sweeper commands: run the service, sweep once, inspect the backlog."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError
import click
from sqlalchemy.exc import SQLAlchemyError

from outbox_sweeper.cli.utils import coro, error, info, success, warning
from outbox_sweeper.cli.utils.settings import load_settings_or_exit
from outbox_sweeper.core.exceptions import OutboxStoreError, SweeperError
from outbox_sweeper.infra.database.session import (
    create_engine,
    create_session_factory,
    dispose_engine,
)
from outbox_sweeper.infra.outbox.repository import OutboxRepository
from outbox_sweeper.sweeper.service import SweeperService

if TYPE_CHECKING:
    from outbox_sweeper.core.settings import Settings
    from outbox_sweeper.sweeper.engine import SweepResult


@click.command()
@click.option("--host", default=None, help="Liveness server bind address (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Liveness server port (default: APP_PORT)")
def run(host: str | None, port: int | None) -> None:
    """Run the liveness server and sweep the outbox periodically.

    Stops on SIGINT/SIGTERM after in-flight sweeps have finished.
    """
    import uvicorn

    from outbox_sweeper.app.main import create_app

    settings = load_settings_or_exit()
    host = host or settings.app.host
    port = port or settings.app.port

    info(f"Liveness endpoint at http://{host}:{port}/health")
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_config=None,
        access_log=settings.logging.include_uvicorn_access,
    )


@coro
async def _sweep_once(settings: Settings) -> SweepResult:
    service = SweeperService(settings)
    async with service.running(schedule=False):
        assert service.sweeper is not None
        return await service.sweeper.sweep()


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def sweep(as_json: bool) -> None:
    """Run a single sweep invocation and print its outcome."""
    settings = load_settings_or_exit()

    try:
        result = _sweep_once(settings)
    except OutboxStoreError as e:
        error(f"Sweep aborted: {e.message}")
        sys.exit(1)
    except SQLAlchemyError as e:
        error(f"Database unavailable: {e}")
        sys.exit(1)
    except (BotoCoreError, ClientError) as e:
        error(f"AWS unavailable: {e}")
        sys.exit(1)
    except SweeperError as e:
        error(f"Sweep failed: {e.message}")
        sys.exit(1)

    if as_json:
        payload = {
            "sweep_id": result.sweep_id,
            "duration_seconds": round(result.duration_seconds, 4),
            "outcomes": [
                {
                    "topic": outcome.topic,
                    "status": outcome.status.value,
                    "messages_found": outcome.messages_found,
                    "messages_dispatched": outcome.messages_dispatched,
                    "kind": outcome.kind.value if outcome.kind else None,
                    "address": outcome.address,
                    "error": outcome.error,
                }
                for outcome in result.outcomes
            ],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if not result.outcomes:
        info("No pending messages")
        return

    for outcome in result.outcomes:
        line = f"{outcome.topic}: {outcome.status.value} ({outcome.messages_dispatched}/{outcome.messages_found})"
        if outcome.ok:
            success(line)
        else:
            warning(f"{line} {outcome.error or ''}".rstrip())

    click.echo(f"Dispatched {result.messages_dispatched} of {result.messages_found} messages")


@coro
async def _pending_counts(settings: Settings, topic: str | None) -> dict[str, int]:
    engine = create_engine(settings.db)
    repository = OutboxRepository()
    try:
        async with create_session_factory(engine)() as session:
            if topic is not None:
                return {topic: await repository.count_pending(session, topic)}
            return await repository.pending_by_topic(session)
    finally:
        await dispose_engine(engine)


@click.command()
@click.option("--topic", default=None, help="Only count this topic")
@click.option("--json", "as_json", is_flag=True, help="Print the counts as JSON")
def pending(topic: str | None, as_json: bool) -> None:
    """Show the number of pending messages per topic."""
    settings = load_settings_or_exit()

    try:
        counts = _pending_counts(settings, topic)
    except OutboxStoreError as e:
        error(f"Failed to count pending messages: {e.message}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(counts, indent=2))
        return

    if not any(counts.values()):
        info("No pending messages")
        return

    width = max(len(name) for name in counts)
    for name, count in counts.items():
        click.echo(f"  {name:{width}}  {count}")
    click.echo(f"Total pending: {sum(counts.values())}")
