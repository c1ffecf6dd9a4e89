from .message import (
    FIRST_DEATH_EXCHANGE_HEADER, FIRST_DEATH_QUEUE_HEADER,
    Acknowledger, DeadLetterMessage, OutgoingMessage,
    Disposition, DispositionOption, PropertyRecord, HeaderRecord, TriageSummary,
)

__all__ = [
    # Headers
    "FIRST_DEATH_EXCHANGE_HEADER", "FIRST_DEATH_QUEUE_HEADER",

    # Messages
    "Acknowledger", "DeadLetterMessage", "OutgoingMessage",

    # Triage
    "Disposition", "DispositionOption", "PropertyRecord", "HeaderRecord", "TriageSummary",
]
