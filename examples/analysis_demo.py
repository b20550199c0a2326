#!/usr/bin/env python3
"""
SYMSEQ Analysis Demo

Runs the full analysis on a human-like sequence, a generator-produced
sequence and a sequence too short for most models.
"""

import random
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from symseq.analysis import (
    GeneratorState,
    LCGParams,
    ReportGenerator,
    SequenceAnalyzer,
)
from symseq.analysis.seed_search import generate
from symseq.core.config import SymseqConfig


def demo_patterned_choices():
    """Analyze a sequence with a habitual alternation."""
    print("=" * 80)
    print("DEMO 1: Habitual Choices")
    print("=" * 80)
    print()

    sequence = [1, 2, 1, 2, 3, 1, 2, 1, 2, 4, 1, 2, 1, 2, 3, 1, 2]
    print(f"Sequence: {sequence}")
    print()

    report = SequenceAnalyzer(rng=random.Random(0)).analyze(sequence)
    print(ReportGenerator().generate_text_report(report))
    print()


def demo_generator_sequence():
    """Recover the seed of an LCG-produced sequence."""
    print("=" * 80)
    print("DEMO 2: Generator-Produced Sequence")
    print("=" * 80)
    print()

    params = LCGParams(69069, 1, 2**32)
    sequence, _ = generate(params, GeneratorState(123), 40)
    print(f"Generated {len(sequence)} symbols from seed 123")
    print()

    report = SequenceAnalyzer().analyze(sequence)
    candidate = report.monte_carlo.data.candidate
    print(f"Recovered seed: {candidate.seed} (similarity {candidate.similarity:.0%})")
    print(f"Predicted next symbols: {list(candidate.predicted_next)}")
    print()


def demo_short_sequence():
    """Show error tags and ensemble placeholders."""
    print("=" * 80)
    print("DEMO 3: Too Few Symbols")
    print("=" * 80)
    print()

    config = SymseqConfig()
    config.ensemble.fuse = True
    report = SequenceAnalyzer(config, rng=random.Random(0)).analyze([3, 1, 3])

    print(f"Models without a result: {', '.join(report.failed_models)}")
    print(f"Placeholder predictions: {', '.join(report.ensemble.placeholder_models)}")
    print()
    print(ReportGenerator().generate_json_report(report))


def main():
    """Run all demos."""
    demos = [
        demo_patterned_choices,
        demo_generator_sequence,
        demo_short_sequence,
    ]

    for demo in demos:
        try:
            demo()
        except KeyboardInterrupt:
            print("\n\nDemo interrupted by user.")
            break


if __name__ == "__main__":
    main()
