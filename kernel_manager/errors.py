from __future__ import annotations


class KernelManagerError(Exception):
    """Base class for kernel manager failures."""


class DatabaseOpenError(KernelManagerError):
    """The package database handle could not be opened."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message if code is None else f"{message} (error code {code})")
        self.message = message
        self.code = code


class TransactionError(KernelManagerError):
    """A package transaction was rejected by the database."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"Transaction {stage} failed: {message}")
        self.stage = stage
        self.message = message


class MalformedAssignmentError(KernelManagerError, ValueError):
    """An environment assignment line without an '=' delimiter."""

    def __init__(self, line_number: int, line: str) -> None:
        super().__init__(f"Malformed environment assignment on line {line_number}: {line!r}")
        self.line_number = line_number
        self.line = line
