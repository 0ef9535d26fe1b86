"""Domain exceptions for dispatch operations.

Each error carries a short operator-facing ``title``; the exception message is
the human-readable description shown beneath it.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base exception for all dispatch errors."""

    title = "Dispatch error"

    def __init__(self, message: str, *, title: str | None = None):
        super().__init__(message)
        if title is not None:
            self.title = title


class ValidationError(DispatchError):
    """Rejected before any network call: bad transition, missing reason, bad amount."""

    title = "Check the form"


class MutationFailure(DispatchError):
    """The mutation API rejected or failed an assign/status/pricing/sms request."""

    title = "Update failed"

    def __init__(
        self,
        message: str,
        *,
        title: str | None = None,
        status_code: int | None = None,
        payload: object = None,
    ):
        super().__init__(message, title=title)
        self.status_code = status_code
        self.payload = payload


class FeedError(DispatchError):
    """The live booking/driver feed could not deliver a snapshot."""

    title = "Live feed unavailable"


class UndoFailure(DispatchError):
    """Restoring a previous assignment failed; the undo entry is kept for retry."""

    title = "Undo failed"
