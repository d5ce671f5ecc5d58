"""
studybuddy/core/errors.py

Typed failures raised by the services and mapped to HTTP responses in one
place (see studybuddy.main).
"""

from typing import Optional


class StudyBuddyError(Exception):
    """Base error carrying the HTTP status and a stable machine-readable code."""
    status_code: int = 500
    code: str = "internal_error"
    retryable: bool = False
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ServiceUnavailable(StudyBuddyError):
    """Study plan generation is not configured (no completion credentials)."""
    status_code = 503
    code = "service_unavailable"
    default_message = (
        "AI study plan generation is not configured on this server (missing GROQ_API_KEY)."
    )


class NoPendingWork(StudyBuddyError):
    status_code = 400
    code = "no_pending_work"
    default_message = "No pending assignments found. Add some assignments to generate a study plan."


class UpstreamError(StudyBuddyError):
    """The completion call itself failed or timed out."""
    status_code = 502
    code = "upstream_error"
    default_message = "Error generating study plan"


class MalformedResponse(StudyBuddyError):
    """The model output did not parse as the expected plan structure."""
    status_code = 502
    code = "malformed_response"
    retryable = True
    default_message = "Error parsing AI response. Please try again."


class NotFound(StudyBuddyError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class Unauthenticated(StudyBuddyError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Authentication required"


class Conflict(StudyBuddyError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"
