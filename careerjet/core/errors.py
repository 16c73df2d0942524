"""Exception hierarchy for the Careerjet client.

Messages are kept stable; callers may match on either the type or the text.
"""

from __future__ import annotations


class CareerjetError(Exception):
    """Base exception for all Careerjet client errors."""


class ConfigurationError(CareerjetError):
    """Raised at construction when a required identity field is missing."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class ValidationError(CareerjetError):
    """Raised when a setter argument or the accumulated query is invalid.

    The query state is never mutated on this path.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class TransportError(CareerjetError):
    """Delivered when the request cannot complete or the body is not JSON."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code
