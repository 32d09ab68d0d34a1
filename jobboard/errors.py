"""
Error taxonomy for the job board data layer.

Stores and helpers raise these; the boundary layer decides how to present
them. Each error carries the status code a web layer would answer with.
"""

from typing import List, Optional


class JobBoardError(Exception):
    """Base error with a message and a client-facing status code."""

    status = 500

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])

    def to_dict(self) -> dict:
        body = {"message": self.message, "status": self.status}
        if self.errors:
            body["errors"] = self.errors
        return body


class InvalidArgumentError(JobBoardError):
    """Raised for empty payloads, bad filter values and duplicates."""

    status = 400


class UnauthorizedError(JobBoardError):
    """Raised when credentials do not match a stored user."""

    status = 401


class NotFoundError(JobBoardError):
    """Raised when a lookup, update or delete targets a missing row."""

    status = 404
