"""Exceptions and warnings raised by the censoring simulation.

Hierarchy:
    SimulationError (base)
    ├── InvalidParameterError - configuration value outside its domain
    └── EmptyCohortError - estimator asked to summarize zero subjects
    EmptySelectionWarning - informative censoring found nobody to censor
"""

from typing import Any, Dict, Optional


class SimulationError(Exception):
    """Base exception for the censoring simulation.

    Attributes:
        message: Human-readable error message.
        context: Additional values useful for debugging.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


class InvalidParameterError(SimulationError, ValueError):
    """A configuration value is outside its valid domain."""


class EmptyCohortError(SimulationError):
    """The estimator was given a group with no subjects."""

    def __init__(self, message: str, group: Optional[str] = None):
        super().__init__(message, {"group": group} if group is not None else None)
        self.group = group


class EmptySelectionWarning(UserWarning):
    """No subject met the informative-censoring criteria; cohort returned as-is."""
