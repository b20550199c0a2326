"""
Analysis Reporting

Serializes analysis records into the `{error, data}` shape handed to the
presentation side, and renders plain-text and JSON reports.
"""

import dataclasses
import json
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, List

import numpy as np

from ..core.models import SYMBOL_NAMES, AnalysisOutcome
from .analyzer import AnalysisReport

# Derived values exposed as properties that belong in serialized output
_EXTRA_PROPERTIES = ("prediction", "classification")


def serialize(value: Any) -> Any:
    """Convert result records into JSON-compatible structures."""
    if isinstance(value, AnalysisOutcome):
        return outcome_to_dict(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {
            field.name: serialize(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
        for name in _EXTRA_PROPERTIES:
            if name not in data and isinstance(getattr(type(value), name, None), property):
                data[name] = serialize(getattr(value, name))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    return value


def outcome_to_dict(outcome: AnalysisOutcome[Any]) -> Dict[str, Any]:
    """Tagged `{error, data}` form of one model outcome."""
    return {
        "error": outcome.error,
        "data": serialize(outcome.data) if outcome.data is not None else None,
    }


def report_to_dict(report: AnalysisReport) -> Dict[str, Any]:
    """Full report as nested dictionaries."""
    result = {
        "total_symbols": report.total_symbols,
        "failed_models": report.failed_models,
    }
    for name, outcome in report.outcomes.items():
        result[name] = outcome_to_dict(outcome)
    result["ensemble"] = serialize(report.ensemble)
    return result


class ReportGenerator:
    """
    Generates human-readable and machine-readable analysis reports.
    """

    def generate_json_report(self, report: AnalysisReport) -> str:
        """
        Generate a machine-readable JSON report.

        Args:
            report: AnalysisReport to format

        Returns:
            JSON string
        """
        report_dict = {"generated_at": datetime.now(UTC).isoformat()}
        report_dict.update(report_to_dict(report))
        return json.dumps(report_dict, indent=2)

    def generate_text_report(self, report: AnalysisReport) -> str:
        """
        Generate a human-readable text report.

        Args:
            report: AnalysisReport to format

        Returns:
            Formatted text report
        """
        lines: List[str] = []
        lines.append("=" * 80)
        lines.append("SYMBOL SEQUENCE RANDOMNESS REPORT")
        lines.append("=" * 80)
        lines.append(
            f"Generated: {datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S UTC')}"
        )
        lines.append(f"Symbols Analyzed: {report.total_symbols}")
        lines.append("")

        self._section(lines, "ENTROPY")
        entropy = report.entropy.data
        if entropy is not None:
            lines.append(
                f"Current Entropy: {entropy.entropy_value:.1f}% "
                f"(window {entropy.window_size})"
            )
            lines.append(f"Previous Window: {entropy.previous_value:.1f}%")
            lines.append(f"Trend: {entropy.trend.value.upper()}")
            lines.append(f"History Points: {len(entropy.historical_data)}")
        lines.append("")

        self._section(lines, "MARKOV MODEL")
        if report.markov.ok:
            markov = report.markov.data
            lines.append("Transition Matrix (row = current, column = next):")
            lines.append("      " + "".join(f"{SYMBOL_NAMES[s]:>8}" for s in SYMBOL_NAMES))
            for index, row in enumerate(markov.transition_matrix):
                cells = "".join(f"{p:8.3f}" for p in row)
                lines.append(f"  {SYMBOL_NAMES[index + 1]:>3} {cells}")
            lines.append(self._prediction_line(markov.prediction))
        else:
            lines.append(f"Unavailable: {report.markov.error}")
        lines.append("")

        self._section(lines, "REPEATED PATTERNS")
        patterns = report.patterns.data
        if patterns is not None and patterns.patterns:
            for i, pattern in enumerate(patterns.patterns, 1):
                symbols = " ".join(SYMBOL_NAMES[s] for s in pattern.pattern)
                lines.append(f"  {i}. {symbols}  x{pattern.occurrences}")
        else:
            lines.append("No repeated patterns.")
        lines.append("")

        self._section(lines, "GENERATOR SEED SEARCH")
        if report.monte_carlo.ok:
            search = report.monte_carlo.data
            candidate = search.candidate
            lines.append(
                f"Best Generator: a={candidate.params.multiplier} "
                f"c={candidate.params.increment} m={candidate.params.modulus}"
            )
            lines.append(f"Seed: {candidate.seed}")
            lines.append(
                f"Similarity: {candidate.similarity:.2%} "
                f"({candidate.matched_length} matched)"
            )
            lines.append(f"Predicted Next: {list(candidate.predicted_next)}")
            chi = search.chi_square
            lines.append(
                f"Chi-Square: {chi.statistic:.4f} (critical {chi.critical_value}) "
                f"-> {chi.classification.upper()}"
            )
            lines.append(f"Approximate P-value: {chi.p_value:.4f}")
        else:
            lines.append(f"Unavailable: {report.monte_carlo.error}")
        lines.append("")

        self._section(lines, "VARIATIONAL INFERENCE")
        if report.variational.ok:
            posterior = report.variational.data.posterior
            for index, (p, u) in enumerate(
                zip(posterior.symbol_probabilities, posterior.uncertainty)
            ):
                lines.append(f"  {SYMBOL_NAMES[index + 1]}  p={p:.4f}  width={u:.4f}")
            lines.append(f"ELBO: {posterior.elbo:.6f}")
            lines.append(
                f"Iterations: {posterior.iterations} "
                f"({'converged' if posterior.converged else 'not converged'})"
            )
        else:
            lines.append(f"Unavailable: {report.variational.error}")
        lines.append("")

        self._section(lines, "ENSEMBLE")
        for name, prediction in report.ensemble.predictions.items():
            weight = report.ensemble.weights.get(name, 0.0)
            marker = " (placeholder)" if prediction.placeholder else ""
            text = self._prediction_text(prediction)
            lines.append(f"  {name:<14} weight {weight:.2f}  {text}{marker}")
        if report.ensemble.fused is not None:
            lines.append(f"  {'fused':<14} {self._prediction_text(report.ensemble.fused)}")

        lines.append("")
        lines.append("=" * 80)

        return "\n".join(lines)

    def _section(self, lines: List[str], title: str) -> None:
        lines.append("-" * 80)
        lines.append(title)
        lines.append("-" * 80)

    def _prediction_text(self, prediction) -> str:
        symbol = prediction.next_symbol
        return f"next {symbol} {SYMBOL_NAMES[symbol]} ({prediction.confidence:.1%})"

    def _prediction_line(self, prediction) -> str:
        return f"Prediction: {self._prediction_text(prediction)}"
