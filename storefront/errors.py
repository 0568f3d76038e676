from __future__ import annotations


class StoreError(Exception):
    """Base for errors surfaced to API callers."""

    type = "unknown_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(StoreError):
    """The store is missing data the operation requires (e.g. no region)."""

    type = "invalid_data"
    status_code = 400


class ValidationError(StoreError, ValueError):
    type = "invalid_data"
    status_code = 400


class NotFoundError(StoreError, LookupError):
    type = "not_found"
    status_code = 404


class TransactionError(StoreError):
    """A unit of work failed and was rolled back."""

    type = "unexpected_state"
    status_code = 500
