"""
Property-based tests for the entropy estimator.
"""

from typing import List

import pytest
from hypothesis import given, settings, strategies as st

from symseq.analysis.entropy import (
    EntropyEstimator,
    EntropyTrend,
    classify_trend,
    window_entropy,
)
from symseq.core.config import EntropyConfig
from symseq.core.exceptions import InvalidSymbolError


symbol_lists = st.lists(st.integers(min_value=1, max_value=4), max_size=60)


class TestWindowEntropy:
    """Normalized entropy of a single window."""

    def test_constant_window_has_zero_entropy(self):
        assert window_entropy([1, 1, 1, 1, 1]) == 0.0

    def test_all_symbols_once_is_maximal(self):
        assert window_entropy([1, 2, 3, 4]) == 100.0

    def test_value_is_rounded_to_one_decimal(self):
        # counts 2/1/1/1 over 5 symbols -> 96.096...
        assert window_entropy([1, 2, 3, 4, 1]) == 96.1

    def test_two_symbols_evenly_is_half(self):
        assert window_entropy([1, 2, 1, 2]) == 50.0

    def test_empty_window(self):
        assert window_entropy([]) == 0.0

    @settings(max_examples=100)
    @given(window=symbol_lists)
    def test_entropy_is_bounded(self, window: List[int]):
        value = window_entropy(window)
        assert 0.0 <= value <= 100.0
        assert round(value, 1) == value


class TestTrendClassification:
    """Trend compares two readings against the margin."""

    def test_increasing(self):
        assert classify_trend(60.0, 50.0, 5.0) == EntropyTrend.INCREASING

    def test_decreasing(self):
        assert classify_trend(40.0, 50.0, 5.0) == EntropyTrend.DECREASING

    def test_within_margin_is_stable(self):
        assert classify_trend(55.0, 50.0, 5.0) == EntropyTrend.STABLE
        assert classify_trend(45.0, 50.0, 5.0) == EntropyTrend.STABLE


class TestEntropyEstimator:
    """Windowed analysis of whole sequences."""

    def test_rising_entropy_is_increasing(self):
        outcome = EntropyEstimator().analyze([1, 1, 1, 1, 1, 1, 2, 3, 4, 1])

        assert outcome.ok
        result = outcome.data
        assert result.entropy_value == 96.1
        assert result.previous_value == 0.0
        assert result.trend == EntropyTrend.INCREASING

    def test_falling_entropy_is_decreasing(self):
        result = EntropyEstimator().analyze([1, 2, 3, 4, 1, 1, 1, 1, 1, 1]).data

        assert result.entropy_value == 0.0
        assert result.previous_value == 96.1
        assert result.trend == EntropyTrend.DECREASING

    def test_single_window_is_stable(self):
        result = EntropyEstimator().analyze([1, 2, 3]).data

        assert result.previous_value == result.entropy_value
        assert result.trend == EntropyTrend.STABLE

    def test_empty_sequence(self):
        outcome = EntropyEstimator().analyze([])

        assert outcome.ok
        assert outcome.data.entropy_value == 0.0
        assert outcome.data.historical_data == ()

    def test_history_is_sliding_and_oldest_first(self):
        sequence = [1, 2, 3, 4, 1, 2, 3]
        result = EntropyEstimator().analyze(sequence, window=4).data

        history = result.historical_data
        assert len(history) == len(sequence) - 4 + 1
        assert [p.window_start for p in history] == [0, 1, 2, 3]
        assert history[0].symbols == (1, 2, 3, 4)
        assert all(p.entropy_value == 100.0 for p in history)

    def test_configured_window_size(self):
        estimator = EntropyEstimator(EntropyConfig(window_size=3))
        result = estimator.analyze([4, 4, 4, 1, 2, 3]).data

        assert result.window_size == 3
        assert result.previous_value == 0.0

    def test_window_must_be_positive(self):
        with pytest.raises(ValueError):
            EntropyEstimator().analyze([1, 2, 3], window=0)

    def test_invalid_symbol_is_rejected(self):
        with pytest.raises(InvalidSymbolError):
            EntropyEstimator().analyze([1, 2, 7])

    @settings(max_examples=50)
    @given(sequence=symbol_lists, window=st.integers(min_value=1, max_value=10))
    def test_history_length(self, sequence: List[int], window: int):
        result = EntropyEstimator().analyze(sequence, window=window).data

        assert len(result.historical_data) == max(0, len(sequence) - window + 1)
        assert 0.0 <= result.entropy_value <= 100.0
