"""Database engine, sessions and declarative base."""

from outbox_sweeper.infra.database.base import Base
from outbox_sweeper.infra.database.session import (
    OUTBOX_SCHEMA,
    check_connection,
    create_engine,
    create_session_factory,
    dispose_engine,
)

__all__ = [
    "OUTBOX_SCHEMA",
    "Base",
    "check_connection",
    "create_engine",
    "create_session_factory",
    "dispose_engine",
]
