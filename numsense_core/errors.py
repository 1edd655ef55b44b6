"""Error taxonomy shared by the core and the HTTP layer.

Scoring and pattern detection never raise; everything below is raised at the
aggregation or transport boundary.  Each class carries the status code the API
maps it to.
"""
from __future__ import annotations


class NumsenseError(Exception):
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(NumsenseError):
    status_code = 400


# a missing caller is malformed input to the core, surfaced as 401
class AuthenticationError(ValidationError):
    status_code = 401


class AuthorizationError(NumsenseError):
    status_code = 403


class NotFoundError(NumsenseError):
    status_code = 404


class InternalError(NumsenseError):
    status_code = 500


__all__ = [
    "NumsenseError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "InternalError",
]
