import asyncio
import signal
import sys
from typing import Optional

import click

from amqp_dead_letter.core.broker_client import BrokerClient
from amqp_dead_letter.core.config import LOG_LEVELS, settings
from amqp_dead_letter.core.exceptions import UsageError
from amqp_dead_letter.core.logging import get_logger, setup_logging
from amqp_dead_letter.core.prompt import ClickPrompter, Prompter
from amqp_dead_letter.schemas.message import TriageSummary
from amqp_dead_letter.services.action_service import ActionService
from amqp_dead_letter.services.triage_service import TriageService
from amqp_dead_letter.workers.triage_worker import TriageWorker

logger = get_logger(__name__)


def install_interrupt_handler(cancel_event: asyncio.Event) -> bool:
    """Turn SIGINT into a request to stop at the next loop iteration."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError, ValueError):
        # No signal handlers off the main thread or on Windows; Ctrl-C stays KeyboardInterrupt
        logger.debug("Interrupt handler not installed")
        return False
    return True


async def run(
    url: str,
    queue: str,
    output_dir: Optional[str] = None,
    prompter: Optional[Prompter] = None,
    broker: Optional[BrokerClient] = None,
) -> TriageSummary:
    """Triage ``queue`` on the broker at ``url`` until it is empty or interrupted."""
    if not url or not queue:
        raise UsageError()

    cancel_event = asyncio.Event()
    handler_installed = install_interrupt_handler(cancel_event)

    broker = broker or BrokerClient(url)
    try:
        async with broker:
            triage = TriageService(
                broker,
                prompter or ClickPrompter(),
                action_service=ActionService(broker, output_dir=output_dir),
            )
            worker = TriageWorker(broker, triage, queue, cancel_event=cancel_event)
            return await worker.run()
    finally:
        if handler_installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("url", required=False, default="")
@click.argument("queue", required=False, default="")
@click.option("--output-dir", default=None, help="Directory for saved dead-letter files.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL for this run.",
)
@click.version_option(version=settings.VERSION, prog_name=settings.APP_NAME)
def cli(url: str, queue: str, output_dir: Optional[str], log_level: Optional[str]):
    """Triage the messages of one AMQP dead-letter QUEUE on the broker at URL."""
    setup_logging(level=log_level)

    try:
        summary = asyncio.run(run(url, queue, output_dir=output_dir))
    except Exception as e:
        logger.error("Triage run failed", error=str(e), error_type=type(e).__name__)
        click.echo(str(e))
        sys.exit(1)

    logger.info(
        "Triage run complete",
        processed=summary.processed,
        dispositions=summary.dispositions,
        reason=summary.stop_reason,
    )


if __name__ == "__main__":
    cli()
