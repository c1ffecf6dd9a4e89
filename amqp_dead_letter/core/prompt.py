import asyncio
from typing import Protocol, Sequence

import click

from amqp_dead_letter.core.exceptions import PromptAborted


class Prompter(Protocol):
    async def select_one(self, message: str, options: Sequence[str]) -> int:
        """Return the zero-based index of the chosen option."""
        ...


class ClickPrompter:
    """
    Numbered single-choice prompt on the terminal.

    The question is asked in a worker thread so the event loop keeps
    handling signals while the operator makes up their mind.
    """

    async def select_one(self, message: str, options: Sequence[str]) -> int:
        return await asyncio.to_thread(self._ask, message, list(options))

    @staticmethod
    def _ask(message: str, options: Sequence[str]) -> int:
        for number, option in enumerate(options, start=1):
            click.echo(f"  {number}) {option}")
        try:
            answer = click.prompt(message, type=click.IntRange(1, len(options)))
        except click.Abort as e:
            raise PromptAborted() from e
        return answer - 1
