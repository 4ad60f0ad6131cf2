"""Error taxonomy for the short link service.

Every error carries a machine-readable ``kind`` and a human ``description``
that is safe to show to a requester. Internal details (query text, driver
messages) stay in the log and never reach ``description``.
"""

from typing import Optional


class ShortLinkError(Exception):
    """Base class for all short link errors."""

    kind = "error"
    default_description = "The request could not be completed"

    def __init__(self, description: Optional[str] = None):
        self.description = description or self.default_description
        super().__init__(self.description)

    def to_dict(self) -> dict:
        """Convert to the structured error body."""
        return {"error": self.kind, "description": self.description}


class InvalidInput(ShortLinkError, ValueError):
    """Malformed or missing long URL, or a malformed short code."""

    kind = "invalid_input"
    default_description = "That doesn't look like a valid URL to shorten"


class DuplicateCode(ShortLinkError):
    """Insert rejected because the short code is already taken."""

    kind = "duplicate_code"
    default_description = "Short code is already in use"

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' is already in use")


class ExhaustedRetries(ShortLinkError):
    """No unique short code could be allocated within the attempt limit."""

    kind = "retries_exhausted"
    default_description = "Could not allocate a unique short code, please try again"

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__()


class NotFound(ShortLinkError, LookupError):
    """No link exists for the requested short code."""

    kind = "not_found"
    default_description = "A link with that short code was not found"

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__()


class StorageError(ShortLinkError):
    """Any storage fault other than the short code constraint."""

    kind = "storage_error"
    default_description = "The link store is unavailable"
