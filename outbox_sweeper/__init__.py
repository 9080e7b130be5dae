"""Transactional outbox sweeper for SQS queues and SNS topics."""

__version__ = "0.1.0"
