"""
Sequence Analyzer

Main interface: runs every model over one immutable sequence snapshot in
parallel and joins the results into an ensemble.
"""

import asyncio
import functools
import random
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..core.config import SymseqConfig, get_config
from ..core.exceptions import AnalysisTimeoutError
from ..core.logging import get_logger
from ..core.models import AnalysisOutcome, SymbolSequence, validate_sequence
from .ensemble import EnsembleCombiner, EnsembleResult
from .entropy import EntropyEstimator, EntropyResult
from .hidden_state import HiddenStateModel, HiddenStateResult
from .markov import MarkovModel, MarkovResult
from .patterns import PatternMiner, PatternResult
from .seed_search import LCGParams, SeedSearch, SeedSearchResult
from .variational import VariationalEngine, VariationalResult

logger = get_logger(__name__)

PREDICTIVE_MODELS = ("markov", "monte_carlo", "variational", "hidden_state")

Branch = Callable[[SymbolSequence], AnalysisOutcome[Any]]


@dataclass(frozen=True)
class AnalysisReport:
    """
    Complete analysis of one sequence snapshot.

    Every model contributes a tagged outcome; a model lacking data carries
    an error string instead of a result and never blocks the others.
    """

    total_symbols: int
    entropy: AnalysisOutcome[EntropyResult]
    markov: AnalysisOutcome[MarkovResult]
    patterns: AnalysisOutcome[PatternResult]
    monte_carlo: AnalysisOutcome[SeedSearchResult]
    variational: AnalysisOutcome[VariationalResult]
    hidden_state: AnalysisOutcome[HiddenStateResult]
    ensemble: EnsembleResult

    @property
    def outcomes(self) -> Dict[str, AnalysisOutcome[Any]]:
        return {
            "entropy": self.entropy,
            "markov": self.markov,
            "patterns": self.patterns,
            "monte_carlo": self.monte_carlo,
            "variational": self.variational,
            "hidden_state": self.hidden_state,
        }

    @property
    def failed_models(self) -> List[str]:
        """Models that returned an error tag instead of a result."""
        return [name for name, outcome in self.outcomes.items() if not outcome.ok]


class SequenceAnalyzer:
    """
    Fan-out/fan-in analysis engine.

    Entropy, Markov, pattern mining, seed search, variational inference and
    the hidden-state model share no state, so they run concurrently; the
    ensemble combiner runs once all of them have returned.
    """

    def __init__(
        self,
        config: Optional[SymseqConfig] = None,
        rng: Optional[random.Random] = None,
        catalog: Optional[Sequence[LCGParams]] = None,
    ):
        """
        Initialize analyzer.

        Args:
            config: Full configuration (defaults to the global configuration)
            rng: Random source for ensemble placeholders
            catalog: LCG catalog override for the seed search
        """
        self.config = config or get_config()
        self.entropy_estimator = EntropyEstimator(self.config.entropy)
        self.markov_model = MarkovModel(self.config.markov)
        self.pattern_miner = PatternMiner(self.config.patterns)
        self.seed_search = SeedSearch(self.config.seed_search, catalog=catalog)
        self.variational_engine = VariationalEngine(self.config.variational)
        self.hidden_state_model = HiddenStateModel(self.config.hidden_state)
        self.combiner = EnsembleCombiner(self.config.ensemble, rng=rng)

    def _branches(
        self, window: Optional[int], entropy_window: Optional[int]
    ) -> Dict[str, Branch]:
        return {
            "entropy": functools.partial(
                self.entropy_estimator.analyze, window=entropy_window
            ),
            "markov": functools.partial(self.markov_model.analyze, window=window),
            "patterns": functools.partial(self.pattern_miner.analyze, window=window),
            "monte_carlo": functools.partial(self.seed_search.analyze, window=window),
            "variational": functools.partial(
                self.variational_engine.analyze, window=window
            ),
            "hidden_state": functools.partial(
                self.hidden_state_model.analyze, window=window
            ),
        }

    def _resolve_timeout(self, timeout: Optional[float]) -> Optional[float]:
        return timeout if timeout is not None else self.config.analyzer.timeout

    def analyze(
        self,
        sequence: Iterable[int],
        window: Optional[int] = None,
        entropy_window: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisReport:
        """
        Run every model on a snapshot of the sequence.

        Args:
            sequence: Observed symbols, oldest first
            window: Optional trailing window for the predictive models
            entropy_window: Entropy window size (defaults to the configured size)
            timeout: Seconds to wait for all models

        Returns:
            AnalysisReport

        Raises:
            AnalysisTimeoutError: If the models do not finish in time
        """
        snapshot = validate_sequence(sequence)
        timeout = self._resolve_timeout(timeout)
        branches = self._branches(window, entropy_window)

        logger.info("Analyzing %d symbols across %d models", len(snapshot), len(branches))

        executor = ThreadPoolExecutor(
            max_workers=self.config.analyzer.max_workers,
            thread_name_prefix="symseq-model",
        )
        try:
            futures = {
                name: executor.submit(branch, snapshot)
                for name, branch in branches.items()
            }
            _, pending = wait(futures.values(), timeout=timeout)
            if pending:
                raise AnalysisTimeoutError(
                    f"Analysis did not finish within {timeout} seconds",
                    details={
                        "pending": [n for n, f in futures.items() if f in pending]
                    },
                )
            outcomes = {name: future.result() for name, future in futures.items()}
        finally:
            # Unfinished branches have no side effects; their results are dropped
            executor.shutdown(wait=False, cancel_futures=True)

        return self._assemble(snapshot, outcomes)

    async def analyze_async(
        self,
        sequence: Iterable[int],
        window: Optional[int] = None,
        entropy_window: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisReport:
        """
        Async variant of `analyze`; models run in a thread pool.

        Raises:
            AnalysisTimeoutError: If the models do not finish in time
        """
        snapshot = validate_sequence(sequence)
        timeout = self._resolve_timeout(timeout)
        branches = self._branches(window, entropy_window)

        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(
            max_workers=self.config.analyzer.max_workers,
            thread_name_prefix="symseq-model",
        )
        try:
            tasks = [
                loop.run_in_executor(executor, branch, snapshot)
                for branch in branches.values()
            ]
            try:
                results = await asyncio.wait_for(asyncio.gather(*tasks), timeout)
            except asyncio.TimeoutError as e:
                raise AnalysisTimeoutError(
                    f"Analysis did not finish within {timeout} seconds"
                ) from e
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return self._assemble(snapshot, dict(zip(branches.keys(), results)))

    def _assemble(
        self, snapshot: SymbolSequence, outcomes: Dict[str, AnalysisOutcome[Any]]
    ) -> AnalysisReport:
        predictions = {name: outcomes[name].prediction for name in PREDICTIVE_MODELS}
        ensemble = self.combiner.combine(predictions)

        failed = [name for name, outcome in outcomes.items() if not outcome.ok]
        if failed:
            logger.info("Models without a result: %s", ", ".join(failed))

        return AnalysisReport(
            total_symbols=len(snapshot),
            entropy=outcomes["entropy"],
            markov=outcomes["markov"],
            patterns=outcomes["patterns"],
            monte_carlo=outcomes["monte_carlo"],
            variational=outcomes["variational"],
            hidden_state=outcomes["hidden_state"],
            ensemble=ensemble,
        )


def analyze_sequence(
    sequence: Iterable[int], config: Optional[SymseqConfig] = None, **kwargs: Any
) -> AnalysisReport:
    """Convenience wrapper around `SequenceAnalyzer(config).analyze`."""
    return SequenceAnalyzer(config=config).analyze(sequence, **kwargs)
