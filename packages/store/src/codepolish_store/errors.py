"""Store error types.

The HTTP layer maps ValidationError to 400 and InternalError to 500.
InternalError messages are generic on purpose; the underlying sqlite3 error
is logged where it happens and chained as ``__cause__``.
"""


class StoreError(Exception):
    """Base class for all history store errors."""


class ValidationError(StoreError, ValueError):
    """Caller supplied a record the store refuses to write."""


class InternalError(StoreError):
    """The storage layer failed."""
