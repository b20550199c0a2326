"""
Tests for the fan-out analysis engine.
"""

import random
import threading
from typing import List

import pytest
from hypothesis import given, settings, strategies as st

from symseq import SequenceAnalyzer, analyze_sequence
from symseq.core.config import AnalyzerConfig, SymseqConfig
from symseq.core.exceptions import AnalysisTimeoutError, InvalidSymbolError


class TestSequenceAnalyzer:
    """Every model runs on the same snapshot; missing data never blocks others."""

    def test_full_analysis(self, test_config: SymseqConfig, balanced_sequence: List[int]):
        report = SequenceAnalyzer(test_config).analyze(balanced_sequence)

        assert report.total_symbols == 100
        assert report.failed_models == []
        assert report.monte_carlo.data.chi_square.is_random
        assert set(report.ensemble.predictions) == set(test_config.ensemble.weights)
        assert report.ensemble.placeholder_models == []

    def test_short_sequence_tags_missing_models(self, test_config: SymseqConfig):
        analyzer = SequenceAnalyzer(test_config, rng=random.Random(5))
        report = analyzer.analyze([1, 2, 1])

        assert report.entropy.ok
        assert report.markov.ok
        assert report.patterns.ok
        assert report.failed_models == ["monte_carlo", "variational", "hidden_state"]
        assert report.monte_carlo.error == "Need at least 10 symbols for Monte Carlo analysis"
        assert report.ensemble.placeholder_models == ["monte_carlo", "variational"]
        assert report.ensemble.predictions["markov"] == report.markov.prediction

    def test_uninformative_markov_row_is_a_placeholder(self, test_config: SymseqConfig):
        # The last symbol 2 never starts a transition, so its row is all zeros
        report = SequenceAnalyzer(test_config, rng=random.Random(2)).analyze([1, 1, 1, 2])

        assert report.markov.ok
        assert report.markov.data.transition_matrix[1] == (0.0, 0.0, 0.0, 0.0)
        assert report.markov.prediction.confidence == 0.0
        assert "markov" in report.ensemble.placeholder_models
        assert report.ensemble.predictions["markov"].confidence == 0.25

    def test_empty_sequence(self, test_config: SymseqConfig):
        report = SequenceAnalyzer(test_config).analyze([])

        assert report.entropy.data.entropy_value == 0.0
        assert not report.markov.ok
        assert len(report.ensemble.placeholder_models) == 3

    def test_invalid_symbol_is_raised(self, test_config: SymseqConfig):
        with pytest.raises(InvalidSymbolError):
            SequenceAnalyzer(test_config).analyze([1, 2, 5])

    def test_window_limits_predictive_models(
        self, test_config: SymseqConfig, random_sequence: List[int]
    ):
        report = SequenceAnalyzer(test_config).analyze(random_sequence, window=12)

        assert report.total_symbols == len(random_sequence)
        assert report.markov.data.total_symbols == 12
        assert report.variational.data.total_symbols == 12
        assert len(report.entropy.data.historical_data) == len(random_sequence) - 5 + 1

    def test_analyze_sequence_wrapper(self, test_config: SymseqConfig):
        report = analyze_sequence([1, 2] * 6, config=test_config)

        assert report.markov.prediction.next_symbol == 1

    def test_input_is_snapshotted(self, test_config: SymseqConfig):
        sequence = [1, 2] * 6
        report = SequenceAnalyzer(test_config).analyze(sequence)
        sequence.append(3)

        assert report.total_symbols == 12

    @settings(max_examples=10, deadline=None)
    @given(sequence=st.lists(st.integers(min_value=1, max_value=4), max_size=40))
    def test_ensemble_keys_match_weights(self, sequence: List[int]):
        config = SymseqConfig(seed_search={"seed_max": 5})
        report = SequenceAnalyzer(config).analyze(sequence)

        assert set(report.ensemble.predictions) == set(config.ensemble.weights)


class TestTimeout:
    """Unfinished analyses raise instead of returning partial reports."""

    def _blocked(self, config: SymseqConfig, release: threading.Event) -> SequenceAnalyzer:
        analyzer = SequenceAnalyzer(config)
        real = analyzer.seed_search.analyze

        def slow(sequence, window=None):
            release.wait(5)
            return real(sequence, window=window)

        analyzer.seed_search.analyze = slow
        return analyzer

    def test_timeout(self, test_config: SymseqConfig):
        release = threading.Event()
        analyzer = self._blocked(test_config, release)
        try:
            with pytest.raises(AnalysisTimeoutError) as exc_info:
                analyzer.analyze([1, 2, 3, 4] * 5, timeout=0.05)
        finally:
            release.set()

        assert exc_info.value.details["pending"] == ["monte_carlo"]

    def test_configured_timeout(self, test_config: SymseqConfig):
        test_config.analyzer = AnalyzerConfig(timeout=0.05)
        release = threading.Event()
        analyzer = self._blocked(test_config, release)
        try:
            with pytest.raises(AnalysisTimeoutError):
                analyzer.analyze([1, 2, 3, 4] * 5)
        finally:
            release.set()

    @pytest.mark.asyncio
    async def test_async_timeout(self, test_config: SymseqConfig):
        release = threading.Event()
        analyzer = self._blocked(test_config, release)
        try:
            with pytest.raises(AnalysisTimeoutError):
                await analyzer.analyze_async([1, 2, 3, 4] * 5, timeout=0.05)
        finally:
            release.set()


class TestAsyncAnalysis:
    """The async entry point yields the same report."""

    @pytest.mark.asyncio
    async def test_async_matches_sync(
        self, test_config: SymseqConfig, random_sequence: List[int]
    ):
        analyzer = SequenceAnalyzer(test_config)

        sync_report = analyzer.analyze(random_sequence)
        async_report = await analyzer.analyze_async(random_sequence)

        assert async_report == sync_report
