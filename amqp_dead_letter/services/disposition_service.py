from typing import Any, List, Mapping, Optional

from amqp_dead_letter.schemas.message import (
    FIRST_DEATH_EXCHANGE_HEADER,
    FIRST_DEATH_QUEUE_HEADER,
    Disposition,
    DispositionOption,
)


def dead_letter_filename(message_id: str) -> str:
    return f"dead-letter-{message_id}.txt"


def get_header(headers: Optional[Mapping[str, Any]], key: str) -> str:
    """Return a string header value, or "" when it is absent or not a string."""
    value = (headers or {}).get(key)
    if isinstance(value, str):
        return value
    return ""


def resolve_dispositions(
    headers: Optional[Mapping[str, Any]],
    message_id: Optional[str],
) -> List[DispositionOption]:
    """
    Build the dispositions available for a dead-lettered message.

    Options come back in display order: republish to queue, republish to
    exchange, save to file, discard. Discard is always offered and always
    last.
    """
    options: List[DispositionOption] = []

    queue = get_header(headers, FIRST_DEATH_QUEUE_HEADER)
    if queue:
        options.append(DispositionOption(
            label=f"republish to queue {queue}",
            disposition=Disposition.REPUBLISH_TO_QUEUE,
            target=queue,
        ))

    exchange = get_header(headers, FIRST_DEATH_EXCHANGE_HEADER)
    if exchange:
        options.append(DispositionOption(
            label=f"republish to exchange {exchange}",
            disposition=Disposition.REPUBLISH_TO_EXCHANGE,
            target=exchange,
        ))

    if message_id:
        filename = dead_letter_filename(message_id)
        options.append(DispositionOption(
            label=f"save to file {filename}",
            disposition=Disposition.SAVE_TO_FILE,
            target=filename,
        ))

    options.append(DispositionOption(label="discard", disposition=Disposition.DISCARD))
    return options
