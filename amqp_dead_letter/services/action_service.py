import os
from pathlib import Path
from typing import Optional

from amqp_dead_letter.core.broker_client import BrokerClient
from amqp_dead_letter.core.config import settings
from amqp_dead_letter.core.exceptions import MissingIdentifier, PersistenceError
from amqp_dead_letter.schemas.message import (
    DeadLetterMessage,
    Disposition,
    DispositionOption,
    OutgoingMessage,
)
from .base_service import BaseService
from .disposition_service import dead_letter_filename
from .report_service import render_delivery


def build_republish_copy(message: DeadLetterMessage) -> OutgoingMessage:
    """Copy a delivery for republishing, forwarding every property verbatim."""
    return OutgoingMessage(
        body=message.body,
        headers=message.headers,
        content_type=message.content_type,
        content_encoding=message.content_encoding,
        delivery_mode=message.delivery_mode,
        priority=message.priority,
        correlation_id=message.correlation_id,
        reply_to=message.reply_to,
        expiration=message.expiration,
        message_id=message.message_id,
        timestamp=message.timestamp,
        type=message.type,
        user_id=message.user_id,
        app_id=message.app_id,
    )


class ActionService(BaseService):
    """Carries out the operator's chosen disposition and acknowledges the delivery."""

    def __init__(self, broker: BrokerClient, output_dir: Optional[str] = None):
        super().__init__(broker)
        self.output_dir = Path(output_dir or settings.OUTPUT_DIR)

    async def execute(self, message: DeadLetterMessage, option: DispositionOption):
        """
        Perform the side effect for ``option`` and acknowledge ``message``.

        The delivery is acknowledged only after the effect succeeded, exactly
        once. Any failure propagates and leaves the message unacknowledged,
        so the broker redelivers it on the next run.
        """
        handlers = {
            Disposition.REPUBLISH_TO_QUEUE: self.republish_to_queue,
            Disposition.REPUBLISH_TO_EXCHANGE: self.republish_to_exchange,
            Disposition.SAVE_TO_FILE: self.save_to_file,
            Disposition.DISCARD: self.discard,
        }
        await handlers[option.disposition](message, option.target)

        await message.acknowledger.ack()

        self.logger.info(
            "Delivery dispositioned",
            delivery_tag=message.delivery_tag,
            message_id=message.message_id,
            disposition=option.disposition.value,
            target=option.target,
        )

    async def republish_to_queue(self, message: DeadLetterMessage, queue: str):
        await self.broker.publish("", queue, build_republish_copy(message))
        self.echo(f"republished directly to queue {queue}")

    async def republish_to_exchange(self, message: DeadLetterMessage, exchange: str):
        # Original routing key, so the message is routed as if freshly produced
        await self.broker.publish(exchange, message.routing_key, build_republish_copy(message))
        self.echo(f"republished to exchange {exchange}")

    async def save_to_file(self, message: DeadLetterMessage, _target: str = ""):
        if not message.message_id:
            raise MissingIdentifier()

        path = self.output_dir / dead_letter_filename(message.message_id)
        report = render_delivery(message, errors="surrogateescape")
        try:
            with open(path, "w", encoding="utf-8", errors="surrogateescape") as f:
                f.write(report)
        except OSError as e:
            self.logger.error(f"Error saving dead letter to {path}: {e}")
            raise PersistenceError(f"failed to save {path}: {e}") from e

        self.echo(f"saved to file {os.fspath(path)}")

    async def discard(self, message: DeadLetterMessage, _target: str = ""):
        self.echo("discarded")
