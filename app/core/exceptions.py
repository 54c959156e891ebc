# app/core/exceptions.py
"""
Error types raised by the engagement services.

Every error carries a machine-readable ``code`` that clients branch on, so the
code strings must stay stable.
"""

from typing import Optional

from fastapi import status


class APIException(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, code: str, status_code: Optional[int] = None):
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationFailed(APIException):
    """Malformed, missing or out-of-enum input."""


class ReferenceNotFound(APIException):
    """A referenced user, post or comment does not exist."""


class InvariantViolation(APIException):
    """Duplicate connection, self-connection, self-award, cap exceeded."""


class ResourceNotFound(APIException):
    """The id-addressed row being read, updated or deleted does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
