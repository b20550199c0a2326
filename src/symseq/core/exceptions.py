"""
SYMSEQ Exception Hierarchy

Defines the exceptions raised by the analysis engine and its boundaries.
"""

from typing import Any, Dict, Optional


class SymseqException(Exception):
    """Base exception for all SYMSEQ errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class InsufficientDataError(SymseqException):
    """Sequence is shorter than a model's minimum length."""

    def __init__(self, model: str, required: int, actual: int) -> None:
        super().__init__(
            f"Need at least {required} symbols for {model} analysis",
            details={"model": model, "required": required, "actual": actual},
        )
        self.model = model
        self.required = required
        self.actual = actual


class InvalidSymbolError(SymseqException):
    """A value outside the symbol alphabet was supplied."""

    pass


class ConfigurationError(SymseqException):
    """Configuration-related errors."""

    pass


class AnalysisTimeoutError(SymseqException):
    """A full analysis did not finish within the caller's timeout."""

    pass
