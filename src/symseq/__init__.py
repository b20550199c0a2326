"""
SYMSEQ - Symbol Sequence Randomness Analyzer

Quantifies how random or patterned a sequence of 4-valued human choices is
using entropy, Markov, generator-seed, variational and ensemble models.
"""

__version__ = "0.1.0"
__author__ = "SYMSEQ Team"

from .analysis import AnalysisReport, SequenceAnalyzer, analyze_sequence
from .core.models import AnalysisOutcome, ModelPrediction, validate_sequence

__all__ = [
    "AnalysisReport",
    "SequenceAnalyzer",
    "analyze_sequence",
    "AnalysisOutcome",
    "ModelPrediction",
    "validate_sequence",
]
