from typing import Any, Dict, Optional

import aio_pika

from amqp_dead_letter.core.config import settings
from amqp_dead_letter.core.exceptions import TransportError
from amqp_dead_letter.core.logging import get_logger
from amqp_dead_letter.schemas.message import (
    Acknowledger,
    DeadLetterMessage,
    Expiration,
    OutgoingMessage,
)

logger = get_logger(__name__)


def expiration_to_wire(value: Expiration) -> Optional[str]:
    """
    Millisecond string of a per-message TTL.

    aio-pika hands the property over as float seconds; rounding recovers
    the integer the producer put on the wire.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    return str(int(round(value * 1000)))


class RepublishedMessage(aio_pika.Message):
    """
    aio-pika message whose expiration goes out as the exact wire string.

    ``aio_pika.Message`` re-encodes seconds with ``int(seconds * 1000)``,
    which can land one millisecond short.
    """

    def __init__(self, *args, wire_expiration: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.wire_expiration = wire_expiration

    @property
    def properties(self):
        properties = super().properties
        properties.expiration = self.wire_expiration
        return properties


class BrokerClient:
    """
    AMQP client for pulling dead-lettered messages one at a time and
    publishing copies of them.

    Every broker failure is re-raised as ``TransportError``; nothing here
    retries.
    """

    def __init__(self, url: str, connect_timeout: Optional[float] = None):
        self.url = url
        self.connect_timeout = connect_timeout or settings.CONNECT_TIMEOUT
        self.connection: Optional[Any] = None
        self.channel: Optional[Any] = None
        self._queues: Dict[str, Any] = {}
        self._exchanges: Dict[str, Any] = {}

    async def connect(self):
        """Open the connection and the single channel used by the run."""
        try:
            self.connection = await aio_pika.connect(self.url, timeout=self.connect_timeout)
            self.channel = await self.connection.channel()
            logger.info("Broker connection established")
        except Exception as e:
            logger.error(f"Failed to connect to broker: {e}")
            if self.connection is not None:
                try:
                    await self.connection.close()
                except Exception as close_error:
                    logger.debug(f"Failed to close half-open connection: {close_error}")
                self.connection = None
            raise TransportError(f"failed to connect to broker: {e}") from e

    async def close(self):
        """Close the broker connection."""
        if self.connection and not self.connection.is_closed:
            await self.connection.close()
            logger.info("Broker connection closed")
        self.connection = None
        self.channel = None
        self._queues.clear()
        self._exchanges.clear()

    async def __aenter__(self) -> "BrokerClient":
        await self.connect()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def _get_queue(self, name: str):
        if name not in self._queues:
            self._queues[name] = await self.channel.get_queue(name, ensure=True)
        return self._queues[name]

    async def _get_exchange(self, name: str):
        if name not in self._exchanges:
            self._exchanges[name] = await self.channel.get_exchange(name, ensure=True)
        return self._exchanges[name]

    async def fetch_one(self, queue_name: str) -> Optional[DeadLetterMessage]:
        """
        Fetch a single message without auto-acknowledgement.

        Returns None when the queue is empty.
        """
        try:
            queue = await self._get_queue(queue_name)
            incoming = await queue.get(no_ack=False, fail=False)
        except Exception as e:
            logger.error(f"Failed to fetch from {queue_name}: {e}")
            raise TransportError(f"failed to fetch from {queue_name}: {e}") from e

        if incoming is None:
            return None
        return self.to_dead_letter(incoming)

    async def publish(self, exchange_name: str, routing_key: str, message: OutgoingMessage):
        """Publish to ``exchange_name``; an empty name is the default exchange."""
        try:
            if exchange_name:
                exchange = await self._get_exchange(exchange_name)
            else:
                exchange = self.channel.default_exchange
            await exchange.publish(self.to_publishing(message), routing_key=routing_key)
            logger.debug(
                "Message published",
                exchange=exchange_name,
                routing_key=routing_key,
                message_id=message.message_id,
            )
        except Exception as e:
            logger.error(f"Failed to publish to exchange '{exchange_name}': {e}")
            raise TransportError(f"failed to publish to exchange '{exchange_name}': {e}") from e

    @staticmethod
    def to_dead_letter(incoming) -> DeadLetterMessage:
        """Map an aio-pika delivery onto the triage envelope."""

        async def ack():
            try:
                await incoming.ack(multiple=False)
            except Exception as e:
                logger.error(f"Failed to acknowledge delivery {incoming.delivery_tag}: {e}")
                raise TransportError(
                    f"failed to acknowledge delivery {incoming.delivery_tag}: {e}"
                ) from e

        return DeadLetterMessage(
            delivery_tag=incoming.delivery_tag,
            acknowledger=Acknowledger(incoming.delivery_tag, ack),
            body=incoming.body,
            routing_key=incoming.routing_key or "",
            exchange=incoming.exchange or "",
            redelivered=bool(incoming.redelivered),
            message_count=getattr(incoming, "message_count", None),
            headers=dict(incoming.headers or {}),
            content_type=incoming.content_type,
            content_encoding=incoming.content_encoding,
            delivery_mode=incoming.delivery_mode,
            priority=incoming.priority,
            correlation_id=incoming.correlation_id,
            reply_to=incoming.reply_to,
            expiration=expiration_to_wire(incoming.expiration),
            message_id=incoming.message_id,
            timestamp=incoming.timestamp,
            type=incoming.type,
            user_id=incoming.user_id,
            app_id=incoming.app_id,
        )

    @staticmethod
    def to_publishing(message: OutgoingMessage) -> aio_pika.Message:
        """Build the aio-pika message for an outgoing copy."""
        return RepublishedMessage(
            body=message.body,
            headers=message.headers,
            content_type=message.content_type,
            content_encoding=message.content_encoding,
            delivery_mode=message.delivery_mode,
            priority=message.priority,
            correlation_id=message.correlation_id,
            reply_to=message.reply_to,
            wire_expiration=expiration_to_wire(message.expiration),
            message_id=message.message_id,
            timestamp=message.timestamp,
            type=message.type,
            user_id=message.user_id,
            app_id=message.app_id,
        )
