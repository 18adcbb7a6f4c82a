"""
Exceptions - Error taxonomy for scheduling and risk modelling

All failures are raised synchronously at the point of detection. Empty job or
machine lists are NOT errors: schedulers return an empty result with the
sentinel KPIs instead.
"""

from typing import Any, Dict, Optional


class SchedulerError(Exception):
    """Base exception for the scheduling and risk core."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputError(SchedulerError, ValueError):
    """Raised when caller-supplied input cannot be used."""


class InvalidInputError(InputError):
    """Raised for invalid records or model arguments."""


class TrainingDataError(InvalidInputError):
    """Raised when a training matrix is empty, ragged or mismatched."""


class DimensionMismatchError(InputError):
    """Raised when a feature vector does not match the model's width."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Feature vector has {actual} values, model expects {expected}",
            {"expected": expected, "actual": actual}
        )
        self.expected = expected
        self.actual = actual


class TrainingCancelledError(SchedulerError):
    """Raised when training is cancelled or exceeds its time budget."""

    def __init__(self, iterations_completed: int, reason: str):
        super().__init__(
            f"Training stopped after {iterations_completed} iteration(s): {reason}",
            {"iterations_completed": iterations_completed, "reason": reason}
        )
        self.iterations_completed = iterations_completed


class ConfigError(SchedulerError):
    """Raised when a policy configuration value is malformed."""
