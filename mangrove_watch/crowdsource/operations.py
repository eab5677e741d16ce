"""
Outcome and state types for asynchronous user operations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OperationState(str, Enum):
    """Lifecycle of a user-triggered asynchronous operation."""
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class OperationResult:
    """Result-or-error of an operation."""
    ok: bool
    value: Any = None
    error: Optional[str] = None
    exception: Optional[Exception] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, exception: Optional[Exception] = None) -> "OperationResult":
        return cls(ok=False, error=error, exception=exception)
