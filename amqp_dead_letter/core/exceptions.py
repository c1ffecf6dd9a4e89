"""
Error taxonomy for a triage run.

Everything except ``MalformedPayload`` is fatal: it propagates to the entry
point, is printed, and ends the process with a non-zero status. Messages that
were not acknowledged stay in the dead-letter queue for the next session.
"""


class DeadLetterError(Exception):
    """Base class for all triage errors."""
    pass


class UsageError(DeadLetterError):
    """Raised when a required argument is missing or empty."""

    def __init__(self, message: str = "usage: amqp-dead-letter <url> <queue>"):
        super().__init__(message)


class TransportError(DeadLetterError):
    """Raised when a broker operation (connect, fetch, publish, ack) fails."""
    pass


class MissingIdentifier(DeadLetterError):
    """Raised when a message without message_id is saved to file."""

    def __init__(self, message: str = "cannot save to file without message_id"):
        super().__init__(message)


class PersistenceError(DeadLetterError):
    """Raised when a dead-letter file cannot be created, written or closed."""
    pass


class AlreadyAcknowledged(DeadLetterError):
    """Raised when an acknowledgement handle is used a second time."""
    pass


class PromptAborted(DeadLetterError):
    """Raised when the operator closes the prompt without choosing."""

    def __init__(self, message: str = "prompt aborted"):
        super().__init__(message)


class MalformedPayload(DeadLetterError):
    """A JSON body that does not parse. Never escapes the payload renderer."""
    pass
