from typing import Optional

from amqp_dead_letter.core.broker_client import BrokerClient
from amqp_dead_letter.core.config import settings
from amqp_dead_letter.core.prompt import Prompter
from amqp_dead_letter.schemas.message import DeadLetterMessage, DispositionOption
from .action_service import ActionService
from .base_service import BaseService
from .disposition_service import resolve_dispositions
from .report_service import render_delivery


class TriageService(BaseService):
    """Shows one delivery to the operator, asks what to do and does it."""

    def __init__(
        self,
        broker: BrokerClient,
        prompter: Prompter,
        action_service: Optional[ActionService] = None,
        prompt_message: Optional[str] = None,
    ):
        super().__init__(broker)
        self.prompter = prompter
        self.actions = action_service or ActionService(broker)
        self.prompt_message = prompt_message or settings.PROMPT_MESSAGE

    def describe(self, message: DeadLetterMessage):
        remaining = message.message_count if message.message_count is not None else "?"
        self.echo(f"MESSAGE {message.delivery_tag} ({remaining} remaining)")
        self.echo(render_delivery(message), nl=False)

    async def process(self, message: DeadLetterMessage) -> DispositionOption:
        """Run the describe / choose / act cycle for a single delivery."""
        self.describe(message)

        options = resolve_dispositions(message.headers, message.message_id)
        index = await self.prompter.select_one(
            self.prompt_message, [option.label for option in options]
        )
        option = options[index]

        await self.actions.execute(message, option)
        return option
