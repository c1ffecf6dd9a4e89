from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from amqp_dead_letter.core.exceptions import AlreadyAcknowledged


FIRST_DEATH_EXCHANGE_HEADER = "x-first-death-exchange"
FIRST_DEATH_QUEUE_HEADER = "x-first-death-queue"

Expiration = Union[str, int, float, None]


class Acknowledger:
    """
    One-shot acknowledgement handle bound to a single delivery.

    The handle is consumed on first use; calling ``ack`` again raises
    ``AlreadyAcknowledged`` instead of sending a second ack for the tag.
    """

    def __init__(self, delivery_tag: int, ack: Callable[[], Awaitable[None]]):
        self.delivery_tag = delivery_tag
        self._ack = ack
        self._used = False

    @property
    def used(self) -> bool:
        return self._used

    async def ack(self) -> None:
        if self._used:
            raise AlreadyAcknowledged(f"delivery {self.delivery_tag} already acknowledged")
        self._used = True
        await self._ack()


@dataclass
class DeadLetterMessage:
    """A message fetched from the dead-letter queue with ``basic.get``."""

    delivery_tag: int
    acknowledger: Acknowledger
    body: bytes = b""
    routing_key: str = ""
    exchange: str = ""
    redelivered: bool = False
    message_count: Optional[int] = None
    headers: Dict[str, Any] = field(default_factory=dict)
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    delivery_mode: Optional[int] = None
    priority: Optional[int] = None
    correlation_id: Optional[str] = None
    reply_to: Optional[str] = None
    expiration: Expiration = None
    message_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    type: Optional[str] = None
    user_id: Optional[str] = None
    app_id: Optional[str] = None


@dataclass
class OutgoingMessage:
    """Copy of a dead-lettered message ready to be published again."""

    body: bytes
    headers: Dict[str, Any]
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    delivery_mode: Optional[int] = None
    priority: Optional[int] = None
    correlation_id: Optional[str] = None
    reply_to: Optional[str] = None
    expiration: Expiration = None
    message_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    type: Optional[str] = None
    user_id: Optional[str] = None
    app_id: Optional[str] = None


class Disposition(str, Enum):
    REPUBLISH_TO_QUEUE = "republish_to_queue"
    REPUBLISH_TO_EXCHANGE = "republish_to_exchange"
    SAVE_TO_FILE = "save_to_file"
    DISCARD = "discard"


@dataclass(frozen=True)
class DispositionOption:
    label: str
    disposition: Disposition
    target: str = ""


@dataclass(frozen=True)
class PropertyRecord:
    name: str
    value: str


@dataclass(frozen=True)
class HeaderRecord:
    key: str
    value: str


@dataclass
class TriageSummary:
    """Outcome of one triage run."""

    processed: int = 0
    dispositions: Dict[str, int] = field(default_factory=dict)
    stop_reason: str = ""

    def record(self, disposition: Disposition):
        self.processed += 1
        self.dispositions[disposition.value] = self.dispositions.get(disposition.value, 0) + 1
