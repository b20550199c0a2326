"""
SYMSEQ Core Models

Symbol alphabet, sequence validation and the record shapes shared by every
analysis model.
"""

import numbers
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Optional, Tuple, TypeVar

from .exceptions import InsufficientDataError, InvalidSymbolError


ALPHABET_SIZE = 4
SYMBOLS: Tuple[int, ...] = (1, 2, 3, 4)
SYMBOL_NAMES = {1: "♥", 2: "♦", 3: "♣", 4: "♠"}

SymbolSequence = Tuple[int, ...]

T = TypeVar("T")


def is_valid_symbol(symbol: Any) -> bool:
    """Check whether a value belongs to the symbol alphabet."""
    return (
        isinstance(symbol, numbers.Integral)
        and not isinstance(symbol, bool)
        and 1 <= symbol <= ALPHABET_SIZE
    )


def symbol_name(symbol: int) -> str:
    """
    Get the display name of a symbol.

    Raises:
        InvalidSymbolError: If the symbol is outside the alphabet
    """
    if not is_valid_symbol(symbol):
        raise InvalidSymbolError(f"Invalid symbol: {symbol!r}")
    return SYMBOL_NAMES[symbol]


def validate_sequence(symbols: Iterable[Any]) -> SymbolSequence:
    """
    Take an immutable snapshot of a symbol sequence.

    Args:
        symbols: Ordered symbols, oldest first

    Returns:
        Tuple copy of the sequence

    Raises:
        InvalidSymbolError: If any value is outside the alphabet
    """
    snapshot = tuple(symbols)
    for position, symbol in enumerate(snapshot):
        if not is_valid_symbol(symbol):
            raise InvalidSymbolError(
                f"Symbol at position {position} must be an integer in 1..{ALPHABET_SIZE}",
                details={"position": position, "value": repr(symbol)},
            )
    return tuple(int(symbol) for symbol in snapshot)


def trailing_window(sequence: SymbolSequence, window: Optional[int]) -> SymbolSequence:
    """Most recent `window` symbols, or the whole sequence when window is None."""
    if window is None:
        return sequence
    if window < 0:
        raise ValueError(f"window must be non-negative, got {window}")
    if window == 0:
        return ()
    return sequence[-window:]


@dataclass(frozen=True)
class ModelPrediction:
    """Next-symbol guess shared by every model; confidence is in [0, 1]."""

    next_symbol: int
    confidence: float
    placeholder: bool = False

    def __post_init__(self):
        """Validate prediction."""
        if not is_valid_symbol(self.next_symbol):
            raise InvalidSymbolError(f"Invalid predicted symbol: {self.next_symbol!r}")
        if not 0 <= self.confidence <= 1:
            raise ValueError(
                f"Confidence must be between 0 and 1, got {self.confidence}"
            )


@dataclass(frozen=True)
class AnalysisOutcome(Generic[T]):
    """
    Tagged result of one model run.

    Exactly one of `error` and `data` is set, so callers can tell
    "insufficient data" apart from a computed (possibly low-confidence)
    result without handling exceptions.
    """

    error: Optional[str] = None
    data: Optional[T] = None

    @classmethod
    def success(cls, data: T) -> "AnalysisOutcome[T]":
        return cls(error=None, data=data)

    @classmethod
    def failure(cls, error: str) -> "AnalysisOutcome[T]":
        return cls(error=error, data=None)

    @classmethod
    def insufficient(cls, exc: InsufficientDataError) -> "AnalysisOutcome[T]":
        return cls.failure(exc.message)

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None

    @property
    def prediction(self) -> Optional[ModelPrediction]:
        """The wrapped result's prediction, if it exposes one."""
        if not self.ok:
            return None
        return getattr(self.data, "prediction", None)
