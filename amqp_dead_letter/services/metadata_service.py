import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping

from amqp_dead_letter.schemas.message import (
    DeadLetterMessage,
    Expiration,
    HeaderRecord,
    PropertyRecord,
)


def format_rfc3339(value: datetime) -> str:
    """RFC3339 in UTC. Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_timestamp(value: Any) -> str:
    """Render an AMQP timestamp as ``"<unix-seconds> (<RFC3339>)"``."""
    if not value:
        return ""
    if isinstance(value, (int, float)):
        value = datetime.fromtimestamp(value, tz=timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return f"{int(value.timestamp())} ({format_rfc3339(value)})"


def format_expiration(value: Expiration) -> str:
    """
    Render a per-message TTL in milliseconds, as it travels on the wire.

    aio-pika decodes the property into seconds, other producers hand over
    the raw string.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        return value
    return str(int(round(value * 1000)))


def render_header_value(value: Any) -> str:
    """
    Render one header value. Every variant an AMQP table can carry has
    exactly one rendering.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return format_rfc3339(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(_to_jsonable(value), sort_keys=True, separators=(",", ":"))
    return repr(value)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return render_header_value(value)


def extract_properties(message: DeadLetterMessage) -> List[PropertyRecord]:
    """Non-empty message properties, sorted by property name."""
    candidates = [
        ("message_id", message.message_id),
        ("type", message.type),
        ("routing_key", message.routing_key),
        ("timestamp", format_timestamp(message.timestamp)),
        ("content_type", message.content_type),
        ("content_encoding", message.content_encoding),
        ("correlation_id", message.correlation_id),
        ("reply_to", message.reply_to),
        ("expiration", format_expiration(message.expiration)),
        ("user_id", message.user_id),
        ("app_id", message.app_id),
    ]

    records = [PropertyRecord(name=name, value=value) for name, value in candidates if value]
    return sorted(records, key=lambda record: record.name)


def extract_headers(message: DeadLetterMessage) -> List[HeaderRecord]:
    """Every header entry, sorted by key."""
    headers = message.headers or {}
    return [
        HeaderRecord(key=key, value=render_header_value(headers[key]))
        for key in sorted(headers)
    ]
