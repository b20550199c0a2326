"""
Generator-Seed Search

Tests the hypothesis that a sequence came from a linear congruential
generator by scoring every (parameter triple, seed) pair of a fixed catalog
against the observations, plus a chi-square goodness-of-fit test for
uniformity.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from scipy import stats

from ..core.config import SeedSearchConfig
from ..core.exceptions import ConfigurationError, InsufficientDataError
from ..core.logging import get_logger, log_structured
from ..core.models import (
    ALPHABET_SIZE,
    AnalysisOutcome,
    ModelPrediction,
    SymbolSequence,
    trailing_window,
    validate_sequence,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class LCGParams:
    """state' = (multiplier * state + increment) mod modulus"""

    multiplier: int
    increment: int
    modulus: int

    def __post_init__(self):
        if self.modulus <= 0:
            raise ConfigurationError(
                f"LCG modulus must be positive, got {self.modulus}"
            )


class GeneratorState(NamedTuple):
    """Generator state and the number of steps taken to reach it."""

    state: int
    step: int = 0


def lcg_next(params: LCGParams, current: GeneratorState) -> Tuple[int, GeneratorState]:
    """
    Advance the generator one step.

    The new state is mapped onto the alphabet as floor(state / m * 4) + 1,
    computed with integers so large moduli stay exact.

    Returns:
        (emitted symbol, next state)
    """
    state = (params.multiplier * current.state + params.increment) % params.modulus
    symbol = (state * ALPHABET_SIZE) // params.modulus + 1
    return symbol, GeneratorState(state, current.step + 1)


def generate(
    params: LCGParams, start: GeneratorState, length: int
) -> Tuple[Tuple[int, ...], GeneratorState]:
    """Emit `length` symbols from `start`, returning them and the final state."""
    symbols = []
    current = start
    for _ in range(length):
        symbol, current = lcg_next(params, current)
        symbols.append(symbol)
    return tuple(symbols), current


def count_matches(observed: Sequence[int], simulated: Sequence[int]) -> int:
    """Number of positions where both sequences agree."""
    return sum(1 for left, right in zip(observed, simulated) if left == right)


def sequence_similarity(observed: Sequence[int], simulated: Sequence[int]) -> float:
    """Fraction of position-wise matches over the shorter length (0.0 if empty)."""
    length = min(len(observed), len(simulated))
    if length == 0:
        return 0.0
    return count_matches(observed, simulated) / length


@dataclass(frozen=True)
class GeneratorCandidate:
    """Best-scoring generator configuration found by the search."""

    params: LCGParams
    seed: int
    similarity: float
    matched_length: int
    predicted_next: Tuple[int, ...]
    catalog_index: int = 0

    def __post_init__(self):
        """Validate candidate."""
        if not 0 <= self.similarity <= 1:
            raise ValueError(
                f"similarity must be between 0 and 1, got {self.similarity}"
            )

    @property
    def confidence(self) -> float:
        return self.similarity


@dataclass(frozen=True)
class ChiSquareResult:
    """Chi-square goodness of fit against a uniform symbol distribution."""

    statistic: float
    p_value: float
    is_random: bool
    observed: Tuple[int, ...]
    expected: float
    critical_value: float
    exact_p_value: float

    @property
    def classification(self) -> str:
        return "appears random" if self.is_random else "potential pattern"


@dataclass(frozen=True)
class SeedSearchResult:
    """Best generator candidate plus the uniformity test."""

    candidate: GeneratorCandidate
    chi_square: ChiSquareResult
    total_symbols: int

    @property
    def prediction(self) -> Optional[ModelPrediction]:
        if not self.candidate.predicted_next:
            return None
        return ModelPrediction(
            next_symbol=self.candidate.predicted_next[0],
            confidence=self.candidate.similarity,
        )


def chi_square_test(
    sequence: SymbolSequence, critical_value: float = 7.815
) -> ChiSquareResult:
    """
    Chi-square test of per-symbol counts against n/4.

    The sequence "appears random" when the statistic is below the critical
    value (0.05 significance, 3 degrees of freedom). `p_value` is the
    linear approximation 1 - statistic / critical_value clamped to [0, 1],
    not a true tail probability; `exact_p_value` carries the chi-square
    survival function for comparison.

    Args:
        sequence: Observed symbols
        critical_value: Classification threshold

    Returns:
        ChiSquareResult
    """
    observed = [0] * ALPHABET_SIZE
    for symbol in sequence:
        observed[symbol - 1] += 1

    n = len(sequence)
    expected = n / ALPHABET_SIZE
    if n == 0:
        statistic = 0.0
    else:
        statistic = sum((count - expected) ** 2 / expected for count in observed)

    p_value = max(0.0, min(1.0, 1 - statistic / critical_value))

    return ChiSquareResult(
        statistic=statistic,
        p_value=p_value,
        is_random=statistic < critical_value,
        observed=tuple(observed),
        expected=expected,
        critical_value=critical_value,
        exact_p_value=float(stats.chi2.sf(statistic, ALPHABET_SIZE - 1)),
    )


def _rank(candidate: GeneratorCandidate) -> Tuple[float, int, int]:
    # Higher similarity wins; ties go to the earlier catalog entry, then the lower seed
    return (candidate.similarity, -candidate.catalog_index, -candidate.seed)


def better_candidate(
    first: Optional[GeneratorCandidate], second: Optional[GeneratorCandidate]
) -> Optional[GeneratorCandidate]:
    """Commutative, associative max-reduction over partial search results."""
    if first is None:
        return second
    if second is None:
        return first
    return first if _rank(first) >= _rank(second) else second


def score_catalog_entry(
    sequence: SymbolSequence,
    params: LCGParams,
    catalog_index: int,
    seeds: Iterable[int],
    lookahead: int = 5,
) -> Optional[GeneratorCandidate]:
    """
    Best seed for one parameter triple.

    Returns:
        The first seed reaching the highest similarity, or None when no seed
        matches a single position
    """
    best: Optional[GeneratorCandidate] = None
    n = len(sequence)
    for seed in seeds:
        simulated, end_state = generate(params, GeneratorState(seed), n)
        matches = count_matches(sequence, simulated)
        if matches > (best.matched_length if best else 0):
            predicted, _ = generate(params, end_state, lookahead)
            best = GeneratorCandidate(
                params=params,
                seed=seed,
                similarity=matches / n,
                matched_length=matches,
                predicted_next=predicted,
                catalog_index=catalog_index,
            )
    return best


class SeedSearch:
    """
    Brute-force LCG seed recovery.

    Every (triple, seed) pair is independent, so catalog entries can be
    scored on a thread pool and merged with `better_candidate`.
    """

    name = "monte_carlo"

    def __init__(
        self,
        config: Optional[SeedSearchConfig] = None,
        catalog: Optional[Sequence[LCGParams]] = None,
    ):
        """
        Initialize seed search.

        Args:
            config: Search configuration
            catalog: LCG triples to search (defaults to the configured catalog)
        """
        self.config = config or SeedSearchConfig()
        if catalog is None:
            catalog = [LCGParams(*triple) for triple in self.config.catalog]
        if not catalog:
            raise ConfigurationError("LCG catalog cannot be empty")
        self.catalog: List[LCGParams] = list(catalog)

    @property
    def seeds(self) -> range:
        return range(self.config.seed_min, self.config.seed_max + 1)

    def search(self, sequence: SymbolSequence) -> GeneratorCandidate:
        """
        Find the best (triple, seed) pair for the sequence.

        Returns:
            Best candidate; seed 0 on the first catalog entry when nothing
            matched
        """
        jobs = list(enumerate(self.catalog))
        lookahead = self.config.lookahead

        def score(job: Tuple[int, LCGParams]) -> Optional[GeneratorCandidate]:
            index, params = job
            return score_catalog_entry(sequence, params, index, self.seeds, lookahead)

        if self.config.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(
                max_workers=min(self.config.max_workers, len(jobs)),
                thread_name_prefix="symseq-seed",
            ) as executor:
                partials = list(executor.map(score, jobs))
        else:
            partials = [score(job) for job in jobs]

        best = reduce(better_candidate, partials, None)
        if best is None:
            best = GeneratorCandidate(
                params=self.catalog[0],
                seed=0,
                similarity=0.0,
                matched_length=0,
                predicted_next=(),
            )
        return best

    def fit(self, sequence: SymbolSequence) -> SeedSearchResult:
        """
        Run the seed search and the chi-square test.

        Raises:
            InsufficientDataError: If the sequence is too short
        """
        if len(sequence) < self.config.min_symbols:
            raise InsufficientDataError(
                "Monte Carlo", self.config.min_symbols, len(sequence)
            )

        candidate = self.search(sequence)
        chi_square = chi_square_test(sequence, self.config.critical_value)

        log_structured(
            logger,
            logging.DEBUG,
            "Seed search finished",
            seed=candidate.seed,
            params=candidate.params,
            similarity=round(candidate.similarity, 4),
            chi_square=round(chi_square.statistic, 4),
        )

        return SeedSearchResult(
            candidate=candidate,
            chi_square=chi_square,
            total_symbols=len(sequence),
        )

    def analyze(
        self, sequence: Iterable[int], window: Optional[int] = None
    ) -> AnalysisOutcome[SeedSearchResult]:
        """
        Analyze the sequence, or its trailing window.

        Returns:
            Outcome with a SeedSearchResult, or an insufficient-data error tag
        """
        symbols = trailing_window(validate_sequence(sequence), window)
        try:
            return AnalysisOutcome.success(self.fit(symbols))
        except InsufficientDataError as e:
            logger.debug("Seed search skipped: %s", e)
            return AnalysisOutcome.insufficient(e)
