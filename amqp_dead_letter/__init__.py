"""Interactive triage of messages stuck in an AMQP dead-letter queue."""

__version__ = "1.0.0"
