"""
Unit tests for TriageService.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from amqp_dead_letter.core.exceptions import PromptAborted
from amqp_dead_letter.schemas.message import Disposition
from amqp_dead_letter.services.action_service import ActionService
from amqp_dead_letter.services.triage_service import TriageService


class TestTriageService:
    """Test cases for the per-message triage procedure."""

    @pytest.fixture
    def actions(self):
        actions = MagicMock(spec=ActionService)
        actions.execute = AsyncMock()
        return actions

    @pytest.mark.asyncio
    async def test_offers_options_and_executes_choice(self, mock_broker, actions, make_message, scripted_prompter):
        prompter = scripted_prompter(1)
        service = TriageService(mock_broker, prompter, action_service=actions, prompt_message="choose an action")
        message = make_message(message_id="m1", headers={"x-first-death-queue": "orders.retry"})

        option = await service.process(message)

        assert prompter.calls == [(
            "choose an action",
            ["republish to queue orders.retry", "save to file dead-letter-m1.txt", "discard"],
        )]
        assert option.disposition == Disposition.SAVE_TO_FILE
        actions.execute.assert_awaited_once_with(message, option)

    @pytest.mark.asyncio
    async def test_describes_message_before_prompting(self, mock_broker, actions, full_message, scripted_prompter, capsys):
        service = TriageService(mock_broker, scripted_prompter(3), action_service=actions)

        await service.process(full_message)

        out = capsys.readouterr().out
        assert out.startswith("MESSAGE 7 (3 remaining)\nPROPERTIES\n")
        assert "HEADERS\n" in out
        assert '"order_id": 42' in out

    @pytest.mark.asyncio
    async def test_unknown_remaining_count(self, mock_broker, actions, make_message, scripted_prompter, capsys):
        service = TriageService(mock_broker, scripted_prompter(0), action_service=actions)

        await service.process(make_message(delivery_tag=2, message_count=None))

        assert capsys.readouterr().out.startswith("MESSAGE 2 (? remaining)")

    @pytest.mark.asyncio
    async def test_prompt_failure_propagates(self, mock_broker, actions, make_message):
        prompter = MagicMock()
        prompter.select_one = AsyncMock(side_effect=PromptAborted())
        service = TriageService(mock_broker, prompter, action_service=actions)
        message = make_message()

        with pytest.raises(PromptAborted):
            await service.process(message)

        actions.execute.assert_not_called()
        assert not message.acknowledger.used
