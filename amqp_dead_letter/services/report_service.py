from typing import List

from tabulate import tabulate

from amqp_dead_letter.schemas.message import DeadLetterMessage
from .metadata_service import extract_headers, extract_properties
from .payload_service import render_payload

TABLE_FORMAT = "github"


def _table(rows: List[List[str]], headers: List[str]) -> str:
    return tabulate(rows, headers=headers, tablefmt=TABLE_FORMAT, disable_numparse=True)


def render_properties(message: DeadLetterMessage) -> str:
    rows = [[record.name, record.value] for record in extract_properties(message)]
    return "PROPERTIES\n" + _table(rows, ["property", "value"]) + "\n"


def render_headers(message: DeadLetterMessage) -> str:
    rows = [[record.key, record.value] for record in extract_headers(message)]
    return "HEADERS\n" + _table(rows, ["key", "value"]) + "\n"


def render_delivery(message: DeadLetterMessage, errors: str = "replace") -> str:
    """
    Render the PROPERTIES, HEADERS and PAYLOAD sections of a delivery.

    The same text is shown to the operator and written to saved files.
    """
    return (
        render_properties(message)
        + render_headers(message)
        + "PAYLOAD\n"
        + render_payload(message.content_type, message.body, errors=errors)
    )
