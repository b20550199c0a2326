"""
Property-based tests for the generator-seed search and chi-square test.
"""

from typing import List

import pytest
from hypothesis import given, settings, strategies as st

from symseq.analysis.seed_search import (
    GeneratorCandidate,
    GeneratorState,
    LCGParams,
    SeedSearch,
    better_candidate,
    chi_square_test,
    generate,
    lcg_next,
    sequence_similarity,
)
from symseq.core.config import SeedSearchConfig
from symseq.core.exceptions import ConfigurationError


MINSTD_LIKE = LCGParams(69069, 1, 2**32)


class TestGenerator:
    """LCG stepping and symbol mapping."""

    def test_single_step(self):
        symbol, state = lcg_next(MINSTD_LIKE, GeneratorState(1))

        assert state == GeneratorState(69070, 1)
        assert symbol == 1

    def test_symbol_is_top_quarter_of_state(self):
        params = LCGParams(1, 3, 4)
        symbol, state = lcg_next(params, GeneratorState(0))

        assert state.state == 3
        assert symbol == 4

    def test_generate_is_deterministic(self):
        first, end_first = generate(MINSTD_LIKE, GeneratorState(42), 20)
        second, end_second = generate(MINSTD_LIKE, GeneratorState(42), 20)

        assert first == second
        assert end_first == end_second
        assert end_first.step == 20
        assert all(1 <= s <= 4 for s in first)

    def test_large_multiplier_stays_exact(self):
        params = LCGParams(22695477, 1, 2**32)
        _, state = lcg_next(params, GeneratorState(2**32 - 1))

        assert state.state == (22695477 * (2**32 - 1) + 1) % 2**32

    def test_modulus_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            LCGParams(1, 1, 0)


class TestSimilarity:
    """Position-wise agreement."""

    def test_partial_match(self):
        assert sequence_similarity([1, 2, 3], [1, 2, 4]) == pytest.approx(2 / 3)

    def test_empty(self):
        assert sequence_similarity([], []) == 0.0

    @settings(max_examples=100)
    @given(
        left=st.lists(st.integers(min_value=1, max_value=4), max_size=30),
        right=st.lists(st.integers(min_value=1, max_value=4), max_size=30),
    )
    def test_bounded_and_symmetric(self, left: List[int], right: List[int]):
        value = sequence_similarity(left, right)

        assert 0.0 <= value <= 1.0
        assert value == sequence_similarity(right, left)


class TestChiSquare:
    """Uniformity test against n/4 per symbol."""

    def test_balanced_counts_appear_random(self, balanced_sequence: List[int]):
        result = chi_square_test(tuple(balanced_sequence))

        assert result.statistic == 0.0
        assert result.p_value == 1.0
        assert result.is_random
        assert result.classification == "appears random"
        assert result.observed == (25, 25, 25, 25)
        assert result.exact_p_value == pytest.approx(1.0)

    def test_constant_sequence_is_a_pattern(self):
        result = chi_square_test((1,) * 20)

        assert result.statistic == pytest.approx(60.0)
        assert result.p_value == 0.0
        assert not result.is_random
        assert result.classification == "potential pattern"
        assert result.exact_p_value < 0.05

    def test_empty_sequence(self):
        result = chi_square_test(())

        assert result.statistic == 0.0
        assert result.p_value == 1.0

    @settings(max_examples=100)
    @given(sequence=st.lists(st.integers(min_value=1, max_value=4), max_size=100))
    def test_p_value_is_clamped(self, sequence: List[int]):
        result = chi_square_test(tuple(sequence))

        assert 0.0 <= result.p_value <= 1.0
        assert result.is_random == (result.statistic < result.critical_value)


class TestSeedSearch:
    """Brute-force recovery over the catalog."""

    def test_recovers_known_seed(self):
        observed, end_state = generate(MINSTD_LIKE, GeneratorState(37), 30)
        search = SeedSearch(SeedSearchConfig(seed_min=1, seed_max=50))

        result = search.analyze(observed).data
        candidate = result.candidate

        assert candidate.params == MINSTD_LIKE
        assert candidate.seed == 37
        assert candidate.similarity == 1.0
        assert candidate.matched_length == 30
        assert candidate.predicted_next == generate(MINSTD_LIKE, end_state, 5)[0]
        assert result.prediction.next_symbol == candidate.predicted_next[0]
        assert result.prediction.confidence == 1.0

    def test_parallel_matches_sequential(self, random_sequence: List[int]):
        sequential = SeedSearch(SeedSearchConfig(seed_max=60, max_workers=1))
        parallel = SeedSearch(SeedSearchConfig(seed_max=60, max_workers=4))

        assert sequential.search(tuple(random_sequence)) == parallel.search(
            tuple(random_sequence)
        )

    def test_no_match_falls_back_to_seed_zero(self):
        # Always emits 1, so a run of 2s never matches
        constant = LCGParams(1, 0, 4)
        search = SeedSearch(
            SeedSearchConfig(seed_min=0, seed_max=0), catalog=[constant]
        )

        result = search.analyze([2] * 10).data

        assert result.candidate.seed == 0
        assert result.candidate.similarity == 0.0
        assert result.candidate.predicted_next == ()
        assert result.prediction is None

    def test_insufficient_data(self):
        outcome = SeedSearch().analyze([1, 2, 3, 4] * 2)

        assert not outcome.ok
        assert outcome.error == "Need at least 10 symbols for Monte Carlo analysis"

    def test_empty_catalog_is_rejected(self):
        with pytest.raises(ConfigurationError):
            SeedSearch(catalog=[])


class TestCandidateReduction:
    """Merging partial results is order independent."""

    def _candidate(self, similarity: float, seed: int, index: int) -> GeneratorCandidate:
        return GeneratorCandidate(
            params=MINSTD_LIKE,
            seed=seed,
            similarity=similarity,
            matched_length=int(similarity * 10),
            predicted_next=(1,),
            catalog_index=index,
        )

    def test_higher_similarity_wins(self):
        low = self._candidate(0.3, 5, 0)
        high = self._candidate(0.6, 9, 3)

        assert better_candidate(low, high) is high
        assert better_candidate(high, low) is high

    def test_ties_prefer_earlier_entry_then_lower_seed(self):
        early = self._candidate(0.5, 9, 0)
        late = self._candidate(0.5, 1, 2)
        low_seed = self._candidate(0.5, 3, 0)

        assert better_candidate(late, early) is early
        assert better_candidate(early, low_seed) is low_seed

    def test_none_is_identity(self):
        candidate = self._candidate(0.1, 1, 0)

        assert better_candidate(None, candidate) is candidate
        assert better_candidate(candidate, None) is candidate
        assert better_candidate(None, None) is None
