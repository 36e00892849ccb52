"""fast_bernoulli error hierarchy and exceptions."""

from __future__ import annotations

from typing import Any, Dict, Optional


class FastBernoulliError(Exception):
    """Base exception for all fast_bernoulli errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(FastBernoulliError):
    """Raised when configuration is invalid or cannot be read."""
    pass


class ValidationError(FastBernoulliError):
    """Raised when validation fails."""
    pass


class InvalidProbabilityError(ValidationError, ValueError):
    """Raised when a sampling probability lies outside ``[0, 1]``."""

    def __init__(self, probability: Any):
        super().__init__(
            "probability must be in the range 0.0 <= probability <= 1.0",
            details={"probability": probability},
        )
        self.probability = probability


class RandomSourceError(FastBernoulliError):
    """Raised when a random source returns values outside its contract."""
    pass
