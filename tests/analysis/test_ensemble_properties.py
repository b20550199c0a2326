"""
Property-based tests for the ensemble combiner.
"""

import random

import pytest
from hypothesis import given, settings, strategies as st

from symseq.analysis.ensemble import EnsembleCombiner
from symseq.core.config import EnsembleConfig
from symseq.core.models import ModelPrediction


predictions = st.builds(
    ModelPrediction,
    next_symbol=st.integers(min_value=1, max_value=4),
    confidence=st.floats(min_value=0.0, max_value=1.0),
)


class TestEnsembleCombiner:
    """One entry per configured model, placeholders for the missing ones."""

    def test_default_weights(self):
        combiner = EnsembleCombiner()

        assert combiner.weights == {"markov": 0.3, "monte_carlo": 0.3, "variational": 0.4}

    def test_missing_predictions_become_placeholders(self):
        result = EnsembleCombiner(rng=random.Random(3)).combine({})

        assert set(result.predictions) == set(result.weights)
        assert result.placeholder_models == ["markov", "monte_carlo", "variational"]
        for prediction in result.predictions.values():
            assert prediction.confidence == 0.25
            assert prediction.placeholder
        assert result.fused is None

    def test_real_predictions_are_kept(self):
        markov = ModelPrediction(next_symbol=2, confidence=0.8)
        result = EnsembleCombiner().combine(
            {
                "markov": markov,
                "monte_carlo": None,
                "hidden_state": ModelPrediction(next_symbol=4, confidence=0.9),
            }
        )

        assert result.predictions["markov"] is markov
        assert "hidden_state" not in result.predictions
        assert result.placeholder_models == ["monte_carlo", "variational"]

    def test_zero_confidence_prediction_becomes_placeholder(self):
        result = EnsembleCombiner(rng=random.Random(3)).combine(
            {"markov": ModelPrediction(next_symbol=1, confidence=0.0)}
        )

        assert result.predictions["markov"].placeholder
        assert result.predictions["markov"].confidence == 0.25

    def test_seeded_placeholders_are_repeatable(self):
        first = EnsembleCombiner(rng=random.Random(7)).combine({})
        second = EnsembleCombiner(rng=random.Random(7)).combine({})

        assert first == second

    @settings(max_examples=100)
    @given(markov=st.one_of(st.none(), predictions), variational=st.one_of(st.none(), predictions))
    def test_keys_always_match_weights(self, markov, variational):
        result = EnsembleCombiner().combine({"markov": markov, "variational": variational})

        assert set(result.predictions) == {"markov", "monte_carlo", "variational"}


class TestFusion:
    """Optional weighted vote."""

    def test_weighted_vote(self):
        combiner = EnsembleCombiner(EnsembleConfig(fuse=True))
        result = combiner.combine(
            {
                "markov": ModelPrediction(next_symbol=1, confidence=1.0),
                "monte_carlo": ModelPrediction(next_symbol=2, confidence=1.0),
                "variational": ModelPrediction(next_symbol=2, confidence=0.5),
            }
        )

        assert result.fused.next_symbol == 2
        assert result.fused.confidence == pytest.approx(0.5 / 0.8)

    def test_ties_go_to_lower_symbol(self):
        combiner = EnsembleCombiner(EnsembleConfig(weights={"a": 0.5, "b": 0.5}))
        fused = combiner.fuse(
            {
                "a": ModelPrediction(next_symbol=3, confidence=1.0),
                "b": ModelPrediction(next_symbol=2, confidence=1.0),
            }
        )

        assert fused.next_symbol == 2
        assert fused.confidence == pytest.approx(0.5)

    def test_zero_confidence_votes(self):
        combiner = EnsembleCombiner(EnsembleConfig(weights={"a": 1.0}))
        fused = combiner.fuse({"a": ModelPrediction(next_symbol=4, confidence=0.0)})

        assert fused.next_symbol == 1
        assert fused.confidence == 0.0
