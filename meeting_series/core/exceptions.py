"""Exceptions raised by the meeting series operations.

Every operation either completes or raises one of these. The API layer
turns them into JSON error responses with the status code stored on the
class, so route handlers never build error responses themselves.
"""

from typing import Any


class MeetingSeriesError(Exception):
    """Base exception for all meeting series errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional error details included in the API response
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(MeetingSeriesError):
    """Raised when a meeting, attendee row, or series does not exist."""

    status_code = 404


class NotInSeriesError(MeetingSeriesError):
    """Raised when a series operation targets a standalone meeting."""

    status_code = 400


class InsufficientDataError(MeetingSeriesError):
    """Raised when a series has too few instances to infer its cadence."""

    status_code = 400


class ValidationError(MeetingSeriesError):
    """Raised for malformed input such as an unknown RSVP status."""

    status_code = 422


class ForbiddenError(MeetingSeriesError):
    """Raised when the caller acts on a group other than their own."""

    status_code = 403


class ConflictError(MeetingSeriesError):
    """Raised when another change to the same series won the race.

    Covers a stale ``expected_version`` on skip, a version compare-and-swap
    that matched no row, and a series lock that could not be acquired in
    time. Nothing has been written when this is raised.
    """

    status_code = 409


class StoreWriteFailure(MeetingSeriesError):
    """Raised when the underlying store fails to persist a change.

    The transaction is rolled back before this propagates. ``details`` holds
    ``meeting_ids``, the meetings the failed batch had touched, so callers
    can tell which rows the retry will cover.
    """

    status_code = 500
