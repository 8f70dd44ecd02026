"""Error taxonomy for the content store.

Validation-class errors carry a ``field -> [messages]`` mapping so a
single response can report every problem.  Whole-entity errors are
reported under the synthetic ``base`` field.
"""

from __future__ import annotations

BASE_FIELD = "base"


class ContentStoreError(Exception):
    """Base class for all content store errors."""


class ValidationError(ContentStoreError):
    """One or more fields failed validation."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        summary = "; ".join(f"{k} {', '.join(v)}" for k, v in errors.items())
        super().__init__(summary or "validation failed")


class UnrecognisedFieldError(ValidationError):
    """The write payload contained keys outside the recognised field set."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(
            {BASE_FIELD: [f"unrecognised field(s) {', '.join(fields)} in input"]}
        )


class TypeMismatchError(ValidationError):
    """A field was given a value of the wrong shape."""

    def __init__(self, field: str, expected: str, actual: str) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            {
                BASE_FIELD: [
                    f"Value of type {actual} cannot be written to a field of type {expected}"
                ]
            }
        )


class MalformedInputError(ContentStoreError):
    """The request body could not be parsed as a JSON object."""


class RegistrationError(ContentStoreError):
    """A call to the routing tier failed."""

    def __init__(self, operation: str, message: str, status: int | None = None) -> None:
        self.operation = operation
        self.status = status
        super().__init__(f"router {operation} failed: {message}")


class PublishError(ContentStoreError):
    """Sending a message to the notification endpoint failed."""
