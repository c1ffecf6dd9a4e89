import json
from typing import Any, Optional

from amqp_dead_letter.core.exceptions import MalformedPayload
from amqp_dead_letter.core.logging import get_logger

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_json_body(body: bytes) -> Any:
    """Parse a JSON body, raising ``MalformedPayload`` when it does not parse."""
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        raise MalformedPayload(str(e)) from e


def render_payload(content_type: Optional[str], body: bytes, errors: str = "replace") -> str:
    """
    Render a message body for the PAYLOAD section.

    Bodies declared as ``application/json`` are pretty printed with two
    space indentation. A JSON body that does not parse renders as nothing at
    all; every other body is emitted as text followed by a newline. ``errors``
    is the codec error handler used to turn non-JSON bytes into text.
    """
    if content_type == JSON_CONTENT_TYPE:
        try:
            payload = parse_json_body(body)
        except MalformedPayload as e:
            logger.debug("Malformed JSON payload skipped", error=str(e))
            return ""
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    return body.decode("utf-8", errors=errors) + "\n"
