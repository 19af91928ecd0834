"""Error types raised by the lesson components."""
from typing import Optional


class VocabMasterError(Exception):
    """Base class for lesson errors."""


class ContentUnavailable(VocabMasterError):
    """Lesson content could not be retrieved or was empty."""

    def __init__(self, unit_id: str, reason: Optional[str] = None):
        self.unit_id = unit_id
        self.reason = reason
        message = f"Lesson for unit {unit_id!r} is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class TransportFailure(VocabMasterError):
    """Completion notification did not reach the backend."""

    def __init__(self, unit_id: str, reason: str):
        self.unit_id = unit_id
        self.reason = reason
        super().__init__(f"Completion notification for unit {unit_id!r} failed: {reason}")


class InvalidInvocation(VocabMasterError):
    """A session operation was called in a state that does not allow it."""

    def __init__(self, operation: str, phase: Optional[str] = None):
        self.operation = operation
        self.phase = phase
        super().__init__(f"{operation} is not allowed in phase {phase or 'not loaded'}")
