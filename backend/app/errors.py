"""Domain errors raised below the routers and rendered by a single handler in ``app.main``."""


class PortalError(Exception):
    """Base class carrying the HTTP status and a stable error code."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(self.message)


class InvalidInput(PortalError):
    """Malformed or missing request fields."""

    status_code = 400
    error = "invalid_input"

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class NotFound(PortalError):
    status_code = 404
    error = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class Conflict(PortalError):
    status_code = 409
    error = "conflict"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message)


class DuplicateVote(Conflict):
    """A category ballot already exists for this voter; it is never overwritten."""

    error = "duplicate_vote"

    def __init__(self, message: str = "Already voted in this election"):
        super().__init__(message)


class StoreUnavailable(PortalError):
    """The relational store failed; not recoverable inside the request."""

    status_code = 500
    error = "store_unavailable"

    def __init__(self, message: str = "Store unavailable"):
        super().__init__(message)


__all__ = [
    "PortalError",
    "InvalidInput",
    "NotFound",
    "Conflict",
    "DuplicateVote",
    "StoreUnavailable",
]
