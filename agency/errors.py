class AgencyError(Exception):
    """Base exception for agency coordination errors."""

    pass


class StoreIOError(AgencyError, OSError):
    """Raised when the document store cannot be read or written."""

    pass


class CorruptionError(AgencyError):
    """Raised when a stored document does not parse as the expected shape."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Corrupt document '{key}': {reason}")
        self.key = key
        self.reason = reason


class NotFoundError(AgencyError):
    """Raised when a referenced item id does not exist."""

    pass


class ConflictError(AgencyError):
    """Raised when an optimistic status precondition fails."""

    def __init__(self, item_id: str, expected, actual: str | None):
        expected_str = "|".join(sorted(expected)) if isinstance(expected, (set, frozenset)) else expected
        super().__init__(f"Conflict on '{item_id}': expected {expected_str}, found {actual}")
        self.item_id = item_id
        self.expected = expected
        self.actual = actual


class AlreadyCompletedError(ConflictError):
    """Raised when a spawn request has already left pending/processing."""

    pass
