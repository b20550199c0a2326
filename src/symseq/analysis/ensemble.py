"""
Ensemble Combiner

Packages every model's own next-symbol guess with a static weight.
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..core.config import EnsembleConfig
from ..core.logging import get_logger
from ..core.models import SYMBOLS, ModelPrediction

logger = get_logger(__name__)


@dataclass(frozen=True)
class EnsembleResult:
    """
    Static weights and one prediction per configured model.

    Entries for models that could not predict are placeholders
    (`placeholder=True`). `fused` is only set when weighted fusion is enabled.
    """

    weights: Dict[str, float]
    predictions: Dict[str, ModelPrediction]
    fused: Optional[ModelPrediction] = None

    @property
    def placeholder_models(self) -> List[str]:
        return [name for name, p in self.predictions.items() if p.placeholder]


class EnsembleCombiner:
    """
    Merges model predictions for display.

    By default the weights only annotate each model's independent guess; no
    single fused symbol is computed. Set `fuse` in the configuration to add
    a weighted vote.
    """

    def __init__(
        self,
        config: Optional[EnsembleConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize combiner.

        Args:
            config: Weights, placeholder confidence and fusion switch
            rng: Source of placeholder symbols (seed it for repeatable output)
        """
        self.config = config or EnsembleConfig()
        self.rng = rng or random.Random()

    @property
    def weights(self) -> Dict[str, float]:
        return dict(self.config.weights)

    def placeholder(self) -> ModelPrediction:
        """Uniformly random symbol with the fixed low confidence."""
        return ModelPrediction(
            next_symbol=self.rng.choice(SYMBOLS),
            confidence=self.config.placeholder_confidence,
            placeholder=True,
        )

    def combine(
        self, predictions: Mapping[str, Optional[ModelPrediction]]
    ) -> EnsembleResult:
        """
        Build the ensemble result.

        Args:
            predictions: Model name -> prediction, or None when the model had
                insufficient data. A zero-confidence prediction carries no
                information and is replaced like a missing one. Names without
                a configured weight are ignored.

        Returns:
            EnsembleResult with exactly one entry per configured model
        """
        combined: Dict[str, ModelPrediction] = {}
        for name in self.config.weights:
            prediction = predictions.get(name)
            if prediction is None or prediction.confidence == 0:
                logger.debug("No usable prediction from %s, using placeholder", name)
                prediction = self.placeholder()
            combined[name] = prediction

        fused = self.fuse(combined) if self.config.fuse else None
        return EnsembleResult(weights=self.weights, predictions=combined, fused=fused)

    def fuse(self, predictions: Mapping[str, ModelPrediction]) -> ModelPrediction:
        """
        Weighted vote: each model adds weight * confidence to its symbol.

        The fused confidence is the winning symbol's share of the total vote.
        """
        scores = {symbol: 0.0 for symbol in SYMBOLS}
        for name, prediction in predictions.items():
            weight = self.config.weights.get(name, 0.0)
            scores[prediction.next_symbol] += weight * prediction.confidence

        total = sum(scores.values())
        best_symbol = max(SYMBOLS, key=lambda s: (scores[s], -s))
        confidence = scores[best_symbol] / total if total > 0 else 0.0
        return ModelPrediction(next_symbol=best_symbol, confidence=min(confidence, 1.0))
