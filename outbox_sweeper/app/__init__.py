"""Liveness HTTP application."""

from outbox_sweeper.app.main import create_app

__all__ = ["create_app"]
