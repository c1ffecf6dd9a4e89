import asyncio
from enum import Enum
from typing import Optional

import click

from amqp_dead_letter.core.broker_client import BrokerClient
from amqp_dead_letter.core.logging import get_logger
from amqp_dead_letter.schemas.message import TriageSummary
from amqp_dead_letter.services.triage_service import TriageService

logger = get_logger(__name__)


class WorkerState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class TriageWorker:
    """
    Drains a dead-letter queue one message at a time.

    The cancellation event is only looked at before each fetch, so a
    disposition that has started always finishes (or fails) first.
    """

    def __init__(
        self,
        broker: BrokerClient,
        triage_service: TriageService,
        queue_name: str,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.broker = broker
        self.triage = triage_service
        self.queue_name = queue_name
        self.cancel_event = cancel_event or asyncio.Event()
        self.state = WorkerState.RUNNING
        self.summary = TriageSummary()

    def _stop(self, reason: str):
        self.state = WorkerState.STOPPED
        self.summary.stop_reason = reason

    async def run(self) -> TriageSummary:
        """Main triage loop."""
        logger.info(f"Starting triage of queue: {self.queue_name}")

        while self.state is WorkerState.RUNNING:
            if self.cancel_event.is_set():
                self._stop("cancelled")
                break

            try:
                message = await self.broker.fetch_one(self.queue_name)
                if message is None:
                    click.echo("no messages left")
                    self._stop("drained")
                    break

                option = await self.triage.process(message)
            except Exception:
                self._stop("failed")
                raise

            self.summary.record(option.disposition)

        logger.info(
            "Triage finished",
            queue=self.queue_name,
            processed=self.summary.processed,
            dispositions=self.summary.dispositions,
            reason=self.summary.stop_reason,
        )
        return self.summary
