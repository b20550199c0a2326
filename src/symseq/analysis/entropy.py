"""
Entropy Estimator

Normalized Shannon entropy over fixed-size symbol windows, with a sliding
history and a trend classification.
"""

import math
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from ..core.config import EntropyConfig
from ..core.logging import get_logger
from ..core.models import (
    ALPHABET_SIZE,
    AnalysisOutcome,
    SymbolSequence,
    validate_sequence,
)

logger = get_logger(__name__)

MAX_ENTROPY = math.log2(ALPHABET_SIZE)


class EntropyTrend(str, Enum):
    """Direction of the latest entropy change."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class EntropyPoint:
    """Entropy of one sliding window."""

    window_start: int
    window_end: int
    entropy_value: float
    window_size: int
    symbols: Tuple[int, ...]


@dataclass(frozen=True)
class EntropyResult:
    """Current entropy, its trend and the sliding-window history."""

    entropy_value: float
    trend: EntropyTrend
    previous_value: float
    window_size: int
    historical_data: Tuple[EntropyPoint, ...]

    def __post_init__(self):
        """Validate entropy range."""
        if not 0 <= self.entropy_value <= 100:
            raise ValueError(
                f"entropy_value must be between 0 and 100, got {self.entropy_value}"
            )


def _round_half_up(value: float, digits: int = 1) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def window_entropy(window: Iterable[int]) -> float:
    """
    Shannon entropy of a window as a percentage of the alphabet maximum.

    Only observed symbols contribute, so an absent symbol never produces
    log(0). The result is rounded half-up to one decimal.

    Args:
        window: Symbols in the window

    Returns:
        Entropy in [0, 100]; 0.0 for an empty window
    """
    counts = Counter(window)
    n = sum(counts.values())
    if n == 0:
        return 0.0

    entropy = 0.0
    for count in counts.values():
        probability = count / n
        entropy -= probability * math.log2(probability)

    percentage = (entropy / MAX_ENTROPY) * 100
    return min(max(_round_half_up(percentage), 0.0), 100.0)


def classify_trend(current: float, previous: float, margin: float) -> EntropyTrend:
    """Compare two entropy readings against a fixed margin."""
    if current > previous + margin:
        return EntropyTrend.INCREASING
    if current < previous - margin:
        return EntropyTrend.DECREASING
    return EntropyTrend.STABLE


class EntropyEstimator:
    """
    Windowed entropy analysis.

    The current window is the most recent W symbols; the trend compares it
    with the W symbols immediately before it.
    """

    def __init__(self, config: Optional[EntropyConfig] = None):
        """
        Initialize entropy estimator.

        Args:
            config: Entropy configuration (window size, trend margin)
        """
        self.config = config or EntropyConfig()

    def history(
        self, sequence: SymbolSequence, window_size: int
    ) -> Tuple[EntropyPoint, ...]:
        """Entropy of every full sliding window, oldest first."""
        points = []
        for start in range(0, len(sequence) - window_size + 1):
            window = sequence[start : start + window_size]
            points.append(
                EntropyPoint(
                    window_start=start,
                    window_end=start + window_size,
                    entropy_value=window_entropy(window),
                    window_size=window_size,
                    symbols=tuple(window),
                )
            )
        return tuple(points)

    def analyze(
        self, sequence: Iterable[int], window: Optional[int] = None
    ) -> AnalysisOutcome[EntropyResult]:
        """
        Analyze entropy of the most recent window.

        Args:
            sequence: Observed symbols, oldest first
            window: Window size (defaults to the configured size)

        Returns:
            Outcome wrapping an EntropyResult; an empty sequence is entropy 0
        """
        symbols = validate_sequence(sequence)
        window_size = window if window is not None else self.config.window_size
        if window_size < 1:
            raise ValueError(f"window must be at least 1, got {window_size}")

        split = max(0, len(symbols) - window_size)
        current_window = symbols[split:]
        previous_window = symbols[max(0, split - window_size) : split]

        current = window_entropy(current_window)
        previous = window_entropy(previous_window) if previous_window else current
        trend = classify_trend(current, previous, self.config.trend_margin)

        logger.debug(
            "Entropy %.1f (previous %.1f, trend %s) over %d symbols",
            current,
            previous,
            trend.value,
            len(symbols),
        )

        return AnalysisOutcome.success(
            EntropyResult(
                entropy_value=current,
                trend=trend,
                previous_value=previous,
                window_size=window_size,
                historical_data=self.history(symbols, window_size),
            )
        )
