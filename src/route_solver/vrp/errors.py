"""Error types raised by the routing engine."""

from __future__ import annotations

from enum import Enum


class ModelErrorKind(str, Enum):
    AMBIGUOUS_PRECEDENCE = "ambiguous_precedence"
    INVALID_PRECEDENCE = "invalid_precedence"
    DANGLING_REFERENCE = "dangling_reference"
    DUPLICATE_ID = "duplicate_id"
    DUPLICATE_INITIAL_STOP = "duplicate_initial_stop"
    MATRIX_DIMENSIONS = "matrix_dimensions"
    INVALID_VALUE = "invalid_value"
    INVALID_INDEX = "invalid_index"


class ModelError(ValueError):
    """Raised when a problem instance cannot be turned into a :class:`Model`."""

    def __init__(self, kind: ModelErrorKind, message: str, *, subject: str | int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.subject = subject

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "subject": self.subject, "message": str(self)}


class OperatorError(RuntimeError):
    """Raised when a plan cannot be applied without breaking solution invariants."""


class SolverConfigError(ValueError):
    """Raised by :class:`SolverBuilder` for an incomplete or invalid configuration."""
