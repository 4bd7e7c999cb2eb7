"""Exception hierarchy for supportdesk."""

# StreamError status for failures where the provider could not be reached
CONNECTION_FAILED_STATUS = "UNKNOWN"


class SupportDeskError(Exception):
    """Base class for all supportdesk errors."""


class IngestionSkip(SupportDeskError):
    """A single upload or archive entry could not be turned into a document.

    Raised and caught inside the normalizer; never escapes a batch.
    """

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


class SessionInitError(SupportDeskError):
    """Opening a conversational session failed."""


class StreamError(SupportDeskError):
    """Sending a message or reading the response stream failed.

    Attributes:
        status: Provider status string, if one was reported (e.g. "UNKNOWN")
    """

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class StorageError(SupportDeskError):
    """Durable storage rejected a read or write."""


class QuotaExceededError(StorageError):
    """Durable storage rejected a write for capacity reasons."""
