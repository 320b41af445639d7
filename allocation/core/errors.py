from enum import Enum


class ErrorKind(str, Enum):
    InvariantViolation = "InvariantViolation"
    Ineligible = "Ineligible"
    InvalidState = "InvalidState"
    NotFound = "not-found"
    NoUpdate = "no-update"
    Conflict = "conflict"
    Unknown = "unknown"


class InvariantViolationError(Exception):
    """A precondition the caller was responsible for did not hold."""

    kind = ErrorKind.InvariantViolation

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DirectoryError(Exception):
    """The property registry could not be reached or answered with an error."""

    def __init__(self, operation: str, detail: str | None = None):
        super().__init__(f"{operation}: {detail}" if detail else operation)
        self.operation = operation
        self.detail = detail
