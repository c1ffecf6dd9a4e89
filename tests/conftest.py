"""
Pytest configuration and fixtures for dead-letter triage tests.
"""
from datetime import datetime, timezone
from typing import List, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from amqp_dead_letter.core.broker_client import BrokerClient
from amqp_dead_letter.core.logging import setup_logging
from amqp_dead_letter.schemas.message import Acknowledger, DeadLetterMessage


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure structlog once, before any logger is first used."""
    setup_logging(level="DEBUG", json_logs=False)


class ScriptedPrompter:
    """Prompter that answers with a fixed list of choices, in order."""

    def __init__(self, *choices: int):
        self.choices = list(choices)
        self.calls: List[tuple] = []

    async def select_one(self, message: str, options: Sequence[str]) -> int:
        self.calls.append((message, list(options)))
        return self.choices.pop(0)


@pytest.fixture
def make_message():
    """Factory for dead-lettered messages with a mocked ack."""

    def _make(delivery_tag: int = 1, **kwargs) -> DeadLetterMessage:
        ack = kwargs.pop("ack", None) or AsyncMock()
        fields = {
            "body": b"",
            "routing_key": "orders.created",
            "message_count": 0,
            "headers": {},
        }
        fields.update(kwargs)
        return DeadLetterMessage(
            delivery_tag=delivery_tag,
            acknowledger=Acknowledger(delivery_tag, ack),
            **fields,
        )

    return _make


@pytest.fixture
def full_message(make_message):
    """Dead-lettered message with every property set."""
    return make_message(
        delivery_tag=7,
        body=b'{"order_id": 42, "status": "failed"}',
        routing_key="orders.created",
        exchange="orders.dlx",
        message_count=3,
        headers={
            "x-first-death-exchange": "orders",
            "x-first-death-queue": "orders.retry",
            "x-first-death-reason": "rejected",
            "x-retries": 3,
        },
        content_type="application/json",
        content_encoding="utf-8",
        delivery_mode=2,
        priority=5,
        correlation_id="corr-1",
        reply_to="replies",
        expiration="60000",
        message_id="m1",
        timestamp=datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
        type="order.created",
        user_id="guest",
        app_id="orders-service",
    )


@pytest.fixture
def mock_broker():
    """Mock broker client."""
    broker = MagicMock(spec=BrokerClient)
    broker.fetch_one = AsyncMock(return_value=None)
    broker.publish = AsyncMock()
    broker.connect = AsyncMock()
    broker.close = AsyncMock()
    broker.__aenter__ = AsyncMock(return_value=broker)
    broker.__aexit__ = AsyncMock(return_value=None)
    return broker


@pytest.fixture
def scripted_prompter():
    return ScriptedPrompter
