"""
Error taxonomy for path-addressed models.

Only malformed input raises. A validation failure is reported through the
return value of the mutating call (a falsy ValidationRejected), mirroring how
the model reports every other "nothing happened" outcome.
"""
from dataclasses import dataclass, field
from typing import Any, Dict


class PathStateError(Exception):
    """Base class for errors raised by pathstate."""


class InvalidPathError(PathStateError, ValueError):
    """Path argument is neither a string nor a segment sequence, or is malformed."""


class NotAnArrayError(PathStateError, TypeError):
    """An array-only operation (add/remove) targeted a value that is not a list."""

    def __init__(self, path: str, value: Any):
        self.path = path
        self.value = value
        super().__init__(f"Value at {path!r} is not a list (got {type(value).__name__})")


@dataclass(frozen=True)
class ValidationRejected:
    """Outcome of a set() whose candidate attributes failed validation.

    Never raised. Returned in place of the model so callers can write
    ``if not model.set(...)``; the model's tree, snapshot and changed map are
    untouched and no events fire.
    """
    error: Any
    attributes: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return False
