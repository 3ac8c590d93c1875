"""
Domain errors raised by the mentorship core.

Each error knows how it is rendered over HTTP and whether the caller may
retry it. The API layer never builds these responses by hand; a single
exception handler in ``clstr.main`` converts them.
"""

from typing import Any

from fastapi import status


class MentorshipError(Exception):
    """Base class for every error surfaced by the mentorship core."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class NotAuthorized(MentorshipError):
    """The actor is not a legitimate party to the request."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidRequest(MentorshipError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(MentorshipError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransition(MentorshipError):
    """The transition is not legal from the current status, or lost a race."""

    status_code = status.HTTP_409_CONFLICT


class DuplicateActiveRequest(MentorshipError):
    status_code = status.HTTP_409_CONFLICT


class SlotsExhausted(MentorshipError):
    status_code = status.HTTP_409_CONFLICT


class MentorUnavailable(MentorshipError):
    """The mentor's offer is inactive or paused."""

    status_code = status.HTTP_409_CONFLICT


class AlreadyApplied(MentorshipError):
    """
    A retried transition found the request already in its target state.

    Callers treat this as success; the HTTP layer answers 200.
    """

    status_code = status.HTTP_200_OK

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "already_applied": True}


class BackendUnavailable(MentorshipError):
    """Transport or storage failure; safe to retry after re-fetching state."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
