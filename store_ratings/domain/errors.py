"""Error taxonomy shared by every domain operation.

Services raise these; the HTTP layer turns them into tagged error payloads.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class carrying a machine readable code and a human message."""

    code = "error"
    status_code = 400

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, str | None]:
        return {"code": self.code, "detail": self.message, "field": self.field}


class ValidationError(DomainError):
    """Malformed input: length, range or shape."""

    code = "validation_error"
    status_code = 422


class Forbidden(DomainError):
    """The authorization policy denied the call."""

    code = "forbidden"
    status_code = 403


class NotFound(DomainError):
    """A referenced user, store, role or rating is absent."""

    code = "not_found"
    status_code = 404


class Conflict(DomainError):
    """The write collides with an existing single-valued record."""

    code = "conflict"
    status_code = 409
