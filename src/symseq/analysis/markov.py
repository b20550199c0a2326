"""
Markov Model

Empirical first-order transition matrix over the symbol alphabet and
next-symbol prediction from the last observed symbol.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..core.config import MarkovConfig
from ..core.exceptions import InsufficientDataError
from ..core.logging import get_logger
from ..core.models import (
    ALPHABET_SIZE,
    AnalysisOutcome,
    ModelPrediction,
    SymbolSequence,
    trailing_window,
    validate_sequence,
)

logger = get_logger(__name__)

TransitionMatrix = Tuple[Tuple[float, ...], ...]


@dataclass(frozen=True)
class MarkovResult:
    """Transition matrix, outgoing transition counts and prediction."""

    transition_matrix: TransitionMatrix
    transition_counts: Tuple[Tuple[int, ...], ...]
    symbol_counts: Tuple[int, ...]
    prediction: ModelPrediction
    total_symbols: int


def count_transitions(sequence: SymbolSequence) -> Tuple[List[List[int]], List[int]]:
    """
    Count consecutive (current -> next) pairs.

    Returns:
        (4x4 count matrix, per-symbol count of outgoing transitions)
    """
    counts = [[0] * ALPHABET_SIZE for _ in range(ALPHABET_SIZE)]
    symbol_counts = [0] * ALPHABET_SIZE
    for current, following in zip(sequence, sequence[1:]):
        counts[current - 1][following - 1] += 1
        symbol_counts[current - 1] += 1
    return counts, symbol_counts


def build_transition_matrix(
    sequence: SymbolSequence,
) -> Tuple[TransitionMatrix, Tuple[int, ...]]:
    """
    Build the row-normalized transition matrix.

    Rows of symbols that never start a transition stay all-zero: they carry
    no information, which is not the same as equal probability.

    Returns:
        (transition matrix, per-symbol outgoing transition counts)
    """
    counts, symbol_counts = count_transitions(sequence)
    return normalize_counts(counts, symbol_counts), tuple(symbol_counts)


def normalize_counts(
    counts: List[List[int]], symbol_counts: List[int]
) -> TransitionMatrix:
    """Divide each count row by its outgoing total."""
    return tuple(
        tuple(
            count / symbol_counts[row] if symbol_counts[row] > 0 else 0.0
            for count in counts[row]
        )
        for row in range(ALPHABET_SIZE)
    )


def predict_next(matrix: TransitionMatrix, last_symbol: int) -> ModelPrediction:
    """Most probable successor of the last symbol, lowest symbol on ties."""
    row = matrix[last_symbol - 1]
    best = max(row)
    return ModelPrediction(next_symbol=row.index(best) + 1, confidence=best)


class MarkovModel:
    """First-order Markov chain over the observed sequence."""

    name = "markov"

    def __init__(self, config: Optional[MarkovConfig] = None):
        self.config = config or MarkovConfig()

    def fit(self, sequence: SymbolSequence) -> MarkovResult:
        """
        Fit the chain and predict the next symbol.

        Raises:
            InsufficientDataError: If the sequence is too short
        """
        if len(sequence) < self.config.min_symbols:
            raise InsufficientDataError(
                "Markov", self.config.min_symbols, len(sequence)
            )

        counts, symbol_counts = count_transitions(sequence)
        matrix = normalize_counts(counts, symbol_counts)
        prediction = predict_next(matrix, sequence[-1])

        logger.debug(
            "Markov prediction %d (p=%.3f) from %d symbols",
            prediction.next_symbol,
            prediction.confidence,
            len(sequence),
        )

        return MarkovResult(
            transition_matrix=matrix,
            transition_counts=tuple(tuple(row) for row in counts),
            symbol_counts=tuple(symbol_counts),
            prediction=prediction,
            total_symbols=len(sequence),
        )

    def analyze(
        self, sequence: Iterable[int], window: Optional[int] = None
    ) -> AnalysisOutcome[MarkovResult]:
        """
        Analyze the sequence, or its trailing window.

        Returns:
            Outcome with a MarkovResult, or an insufficient-data error tag
        """
        symbols = trailing_window(validate_sequence(sequence), window)
        try:
            return AnalysisOutcome.success(self.fit(symbols))
        except InsufficientDataError as e:
            logger.debug("Markov analysis skipped: %s", e)
            return AnalysisOutcome.insufficient(e)
