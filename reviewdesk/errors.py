"""Failure taxonomy of the review session controller.

None of these is fatal to a session: every path that raises leaves the
previous state in place.
"""

from __future__ import annotations


class ReviewDeskError(Exception):
    """Base class for review session errors."""


class TransportFailure(ReviewDeskError):
    """The remote authority was unreachable or answered with an error."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConflictDeclined(ReviewDeskError):
    """The operator refused to discard unsaved edits."""


class MalformedPattern(ReviewDeskError):
    """A search expression could not be compiled."""


class NoOpenDocument(ReviewDeskError):
    """An operation needed an open document and there is none."""
