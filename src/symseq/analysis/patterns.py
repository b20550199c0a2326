"""
Repeated Pattern Mining

Finds contiguous symbol subsequences that occur more than once.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.config import PatternConfig
from ..core.exceptions import ConfigurationError
from ..core.logging import get_logger
from ..core.models import (
    AnalysisOutcome,
    SymbolSequence,
    trailing_window,
    validate_sequence,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Pattern:
    """A repeated subsequence and its (overlapping) occurrence count."""

    pattern: Tuple[int, ...]
    occurrences: int

    def __post_init__(self):
        """Validate pattern."""
        if self.occurrences < 2:
            raise ValueError(
                f"Only repeated patterns are reported, got {self.occurrences} occurrence(s)"
            )

    @property
    def length(self) -> int:
        return len(self.pattern)


@dataclass(frozen=True)
class PatternResult:
    """Most frequent repeated patterns."""

    patterns: Tuple[Pattern, ...]
    total_patterns: int
    total_symbols: int


def find_repeated_patterns(
    sequence: SymbolSequence, min_length: int = 2, max_length: int = 4
) -> List[Pattern]:
    """
    Find every subsequence of bounded length that occurs more than once.

    Occurrences overlap ([1,2,1,2,1,2] holds [1,2] three times). Patterns
    are deduplicated by content and sorted by occurrence count, descending;
    ties keep discovery order (shorter patterns first, then earliest start).

    Args:
        sequence: Symbols to scan
        min_length: Shortest pattern length
        max_length: Longest pattern length

    Returns:
        Repeated patterns, most frequent first
    """
    if min_length < 1 or min_length > max_length:
        raise ConfigurationError(
            "Invalid pattern length bounds",
            details={"min_length": min_length, "max_length": max_length},
        )

    found: Dict[Tuple[int, ...], int] = {}
    for length in range(min_length, max_length + 1):
        # Counter keeps first-seen order, matching a left-to-right scan
        windows = Counter(
            tuple(sequence[i : i + length]) for i in range(len(sequence) - length + 1)
        )
        for pattern, occurrences in windows.items():
            if occurrences > 1 and pattern not in found:
                found[pattern] = occurrences

    patterns = [Pattern(pattern=p, occurrences=n) for p, n in found.items()]
    patterns.sort(key=lambda p: p.occurrences, reverse=True)
    return patterns


class PatternMiner:
    """
    Reports the most frequent repeated patterns of a sequence.
    """

    def __init__(self, config: Optional[PatternConfig] = None):
        """
        Initialize pattern miner.

        Args:
            config: Length bounds and number of patterns reported
        """
        self.config = config or PatternConfig()

    def analyze(
        self, sequence: Iterable[int], window: Optional[int] = None
    ) -> AnalysisOutcome[PatternResult]:
        """
        Mine repeated patterns.

        Args:
            sequence: Observed symbols, oldest first
            window: Optional trailing window

        Returns:
            Outcome wrapping the top patterns; short sequences yield none
        """
        symbols = trailing_window(validate_sequence(sequence), window)
        patterns = find_repeated_patterns(
            symbols, self.config.min_length, self.config.max_length
        )
        logger.debug("Found %d repeated patterns in %d symbols", len(patterns), len(symbols))
        return AnalysisOutcome.success(
            PatternResult(
                patterns=tuple(patterns[: self.config.top_k]),
                total_patterns=len(patterns),
                total_symbols=len(symbols),
            )
        )
