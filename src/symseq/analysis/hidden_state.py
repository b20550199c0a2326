"""
Hidden-State Model

Two-state heuristic: state 0 emits symbols uniformly (random choosing),
state 1 is biased toward the recently observed frequencies (pattern
following).
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..core.config import HiddenStateConfig
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

RANDOM_STATE = 0
PATTERN_STATE = 1


@dataclass(frozen=True)
class HiddenStateResult:
    """Emission table, dominant-symbol strength and prediction."""

    states: Tuple[int, ...]
    emission_probs: Tuple[Tuple[float, ...], ...]
    frequencies: Tuple[int, ...]
    pattern_strength: float
    prediction: ModelPrediction


class HiddenStateModel:
    """Recent-window hidden-state estimate of random vs. pattern-following behavior."""

    name = "hidden_state"

    def __init__(self, config: Optional[HiddenStateConfig] = None):
        self.config = config or HiddenStateConfig()

    def fit(self, sequence: SymbolSequence) -> HiddenStateResult:
        """
        Estimate emissions from the most recent symbols.

        Raises:
            InsufficientDataError: If too few recent symbols are available
        """
        recent = sequence[-self.config.recent_window :]
        if len(recent) < self.config.min_symbols:
            raise InsufficientDataError(
                "hidden-state", self.config.min_symbols, len(recent)
            )

        frequencies = [0] * ALPHABET_SIZE
        for symbol in recent:
            frequencies[symbol - 1] += 1
        total = len(recent)

        max_frequency = max(frequencies)
        pattern_strength = max_frequency / total

        # 0.1 floor keeps unseen symbols possible in the pattern state
        biased = [0.1 + 0.9 * f / total for f in frequencies]
        norm = sum(biased)
        emissions = (
            tuple(1 / ALPHABET_SIZE for _ in range(ALPHABET_SIZE)),
            tuple(b / norm for b in biased),
        )

        if pattern_strength > self.config.pattern_threshold:
            confidence = min(1.0, pattern_strength)
        else:
            confidence = self.config.base_confidence

        prediction = ModelPrediction(
            next_symbol=frequencies.index(max_frequency) + 1,
            confidence=confidence,
        )

        logger.debug(
            "Hidden-state strength %.2f over %d recent symbols", pattern_strength, total
        )

        return HiddenStateResult(
            states=(RANDOM_STATE, PATTERN_STATE),
            emission_probs=emissions,
            frequencies=tuple(frequencies),
            pattern_strength=pattern_strength,
            prediction=prediction,
        )

    def analyze(
        self, sequence: Iterable[int], window: Optional[int] = None
    ) -> AnalysisOutcome[HiddenStateResult]:
        """
        Analyze the sequence, or its trailing window.

        Returns:
            Outcome with a HiddenStateResult, or an insufficient-data error tag
        """
        symbols = trailing_window(validate_sequence(sequence), window)
        try:
            return AnalysisOutcome.success(self.fit(symbols))
        except InsufficientDataError as e:
            logger.debug("Hidden-state analysis skipped: %s", e)
            return AnalysisOutcome.insufficient(e)
