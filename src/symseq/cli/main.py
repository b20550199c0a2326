"""
SYMSEQ CLI Main Entry Point

Command-line interface for analyzing symbol sequences.
"""

import json
import random
import re
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import click

from .. import __version__
from ..analysis.analyzer import SequenceAnalyzer
from ..analysis.reporting import ReportGenerator, outcome_to_dict
from ..core.config import get_config
from ..core.exceptions import AnalysisTimeoutError, InvalidSymbolError
from ..core.logging import setup_logging
from ..core.models import SYMBOL_NAMES, validate_sequence

_SEPARATORS = re.compile(r"[\s,;|]+")


def parse_symbols(tokens: Iterable[str]) -> List[int]:
    """
    Parse symbols from command-line tokens.

    Accepts separate arguments ("1 2 3"), delimited lists ("1,2,3") and
    packed digit strings ("123").

    Raises:
        click.BadParameter: If a token is not made of digits
    """
    symbols: List[int] = []
    for token in tokens:
        for part in _SEPARATORS.split(token.strip()):
            if not part:
                continue
            if not part.isdigit():
                raise click.BadParameter(f"Not a symbol: {part!r}")
            symbols.extend(int(digit) for digit in part)
    return symbols


def _load_symbols(symbols: tuple, file: Optional[str]) -> List[int]:
    tokens = list(symbols)
    if file:
        tokens.append(Path(file).read_text(encoding="utf-8"))
    parsed = parse_symbols(tokens)
    try:
        return list(validate_sequence(parsed))
    except InvalidSymbolError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
def cli(log_level: Optional[str]):
    """
    SYMSEQ - Symbol Sequence Randomness Analyzer

    Quantifies how random or patterned a sequence of symbols 1-4 is.
    """
    setup_logging(log_level=log_level)


@cli.command()
@click.argument("symbols", nargs=-1)
@click.option("--file", "-f", type=click.Path(exists=True), help="Read symbols from file")
@click.option(
    "--window",
    "-w",
    type=click.IntRange(min=0),
    default=None,
    help="Trailing window for the models",
)
@click.option(
    "--entropy-window", type=click.IntRange(min=1), default=None, help="Entropy window size"
)
@click.option(
    "--format",
    "-F",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.option("--timeout", type=float, default=None, help="Seconds before giving up")
@click.option("--seed", type=int, default=None, help="Seed for placeholder predictions")
def analyze(
    symbols: tuple,
    file: Optional[str],
    window: Optional[int],
    entropy_window: Optional[int],
    output_format: str,
    timeout: Optional[float],
    seed: Optional[int],
):
    """
    Run every model and the ensemble.

    Example:
        symseq analyze 1 2 3 4 1 2 3 4 1 2 --format json
    """
    sequence = _load_symbols(symbols, file)
    rng = random.Random(seed) if seed is not None else None
    analyzer = SequenceAnalyzer(config=get_config(), rng=rng)

    try:
        report = analyzer.analyze(
            sequence, window=window, entropy_window=entropy_window, timeout=timeout
        )
    except AnalysisTimeoutError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    generator = ReportGenerator()
    if output_format == "json":
        click.echo(generator.generate_json_report(report))
    else:
        click.echo(generator.generate_text_report(report))


@cli.command()
@click.argument(
    "name",
    type=click.Choice(
        ["entropy", "markov", "patterns", "monte_carlo", "variational", "hidden_state"]
    ),
)
@click.argument("symbols", nargs=-1)
@click.option("--file", "-f", type=click.Path(exists=True), help="Read symbols from file")
@click.option(
    "--window", "-w", type=int, default=None, help="Trailing window (entropy: window size)"
)
def model(name: str, symbols: tuple, file: Optional[str], window: Optional[int]):
    """
    Run a single model and print its {error, data} result as JSON.

    Example:
        symseq model markov 1 2 1 2 1 2
    """
    sequence = _load_symbols(symbols, file)
    analyzer = SequenceAnalyzer(config=get_config())
    runners = {
        "entropy": analyzer.entropy_estimator,
        "markov": analyzer.markov_model,
        "patterns": analyzer.pattern_miner,
        "monte_carlo": analyzer.seed_search,
        "variational": analyzer.variational_engine,
        "hidden_state": analyzer.hidden_state_model,
    }
    try:
        outcome = runners[name].analyze(sequence, window=window)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--window") from e
    click.echo(json.dumps(outcome_to_dict(outcome), indent=2))
    if not outcome.ok:
        sys.exit(2)


@cli.command()
@click.argument("symbols", nargs=-1)
@click.option("--file", "-f", type=click.Path(exists=True), help="Read symbols from file")
@click.option("--window", "-w", type=int, default=None, help="Window size")
@click.option("--history", is_flag=True, help="Show every sliding window")
def entropy(symbols: tuple, file: Optional[str], window: Optional[int], history: bool):
    """
    Show the entropy of the most recent window and its trend.

    Example:
        symseq entropy 1 1 1 1 1 1 2 3 4 1 --history
    """
    sequence = _load_symbols(symbols, file)
    if window is not None and window < 1:
        raise click.BadParameter("window must be at least 1", param_hint="--window")

    result = SequenceAnalyzer(config=get_config()).entropy_estimator.analyze(
        sequence, window=window
    ).data

    click.echo(f"Entropy: {result.entropy_value:.1f}% (window {result.window_size})")
    click.echo(f"Previous: {result.previous_value:.1f}%")
    click.echo(f"Trend: {result.trend.value}")
    if history:
        for point in result.historical_data:
            symbols_text = " ".join(SYMBOL_NAMES[s] for s in point.symbols)
            click.echo(
                f"  [{point.window_start:>4}:{point.window_end:<4}] "
                f"{point.entropy_value:5.1f}%  {symbols_text}"
            )


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
