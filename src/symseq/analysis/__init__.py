"""
SYMSEQ Analysis Module

Entropy, Markov, pattern, generator-seed, variational and hidden-state
models over 4-symbol choice sequences, plus the ensemble combiner.
"""

from .analyzer import AnalysisReport, SequenceAnalyzer, analyze_sequence
from .ensemble import EnsembleCombiner, EnsembleResult
from .entropy import (
    EntropyEstimator,
    EntropyPoint,
    EntropyResult,
    EntropyTrend,
    window_entropy,
)
from .hidden_state import HiddenStateModel, HiddenStateResult
from .markov import MarkovModel, MarkovResult, build_transition_matrix
from .patterns import Pattern, PatternMiner, PatternResult, find_repeated_patterns
from .reporting import ReportGenerator, report_to_dict
from .seed_search import (
    ChiSquareResult,
    GeneratorCandidate,
    GeneratorState,
    LCGParams,
    SeedSearch,
    SeedSearchResult,
    chi_square_test,
    lcg_next,
    sequence_similarity,
)
from .variational import (
    Posterior,
    VariationalEngine,
    VariationalResult,
    run_variational_inference,
)

__all__ = [
    "AnalysisReport",
    "SequenceAnalyzer",
    "analyze_sequence",
    "EnsembleCombiner",
    "EnsembleResult",
    "EntropyEstimator",
    "EntropyPoint",
    "EntropyResult",
    "EntropyTrend",
    "window_entropy",
    "HiddenStateModel",
    "HiddenStateResult",
    "MarkovModel",
    "MarkovResult",
    "build_transition_matrix",
    "Pattern",
    "PatternMiner",
    "PatternResult",
    "find_repeated_patterns",
    "ReportGenerator",
    "report_to_dict",
    "ChiSquareResult",
    "GeneratorCandidate",
    "GeneratorState",
    "LCGParams",
    "SeedSearch",
    "SeedSearchResult",
    "chi_square_test",
    "lcg_next",
    "sequence_similarity",
    "Posterior",
    "VariationalEngine",
    "VariationalResult",
    "run_variational_inference",
]
