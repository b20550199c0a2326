"""
Variational Inference Engine

Coordinate-ascent fit of a Dirichlet posterior over per-symbol occurrence
probability, with an auxiliary per-symbol Gaussian location/spread pair.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, NamedTuple, Optional, Tuple

import numpy as np
from scipy import special

from ..core.config import VariationalConfig
from ..core.exceptions import InsufficientDataError
from ..core.logging import get_logger
from ..core.models import (
    ALPHABET_SIZE,
    AnalysisOutcome,
    ModelPrediction,
    SymbolSequence,
    trailing_window,
    validate_sequence,
)

logger = get_logger(__name__)

ArrayFunction = Callable[[np.ndarray], np.ndarray]


def stirling_log_gamma(x) -> np.ndarray:
    """
    log of the Stirling approximation sqrt(2*pi/x) * (x/e)**x, with
    Gamma(1) taken as exactly 1.

    Evaluated in log space so large concentrations never overflow.
    """
    x = np.asarray(x, dtype=float)
    approx = 0.5 * np.log(2 * math.pi / x) + x * (np.log(x) - 1)
    return np.where(x == 1.0, 0.0, approx)


def approx_digamma(x) -> np.ndarray:
    """psi(x) ~ ln(x) - 1/(2x)"""
    x = np.asarray(x, dtype=float)
    return np.log(x) - 1 / (2 * x)


class SpecialFunctions(NamedTuple):
    """log-gamma and digamma implementations used by the ELBO."""

    log_gamma: ArrayFunction
    digamma: ArrayFunction


APPROXIMATE = SpecialFunctions(stirling_log_gamma, approx_digamma)
EXACT = SpecialFunctions(special.gammaln, special.digamma)


@dataclass
class VariationalState:
    """Working parameters, updated in place on every iteration."""

    alpha: np.ndarray = field(default_factory=lambda: np.ones(ALPHABET_SIZE))
    mu: np.ndarray = field(default_factory=lambda: np.zeros(ALPHABET_SIZE))
    sigma: np.ndarray = field(default_factory=lambda: np.ones(ALPHABET_SIZE))


@dataclass(frozen=True)
class Posterior:
    """
    Final variational posterior.

    `uncertainty` is sigma * sqrt(alpha) per symbol: a heuristic width, not
    a calibrated credible interval.
    """

    symbol_probabilities: Tuple[float, ...]
    uncertainty: Tuple[float, ...]
    concentration: Tuple[float, ...]
    means: Tuple[float, ...]
    elbo: float
    iterations: int
    converged: bool


@dataclass(frozen=True)
class VariationalResult:
    """Posterior plus the derived next-symbol prediction."""

    posterior: Posterior
    prediction: ModelPrediction
    total_symbols: int


def symbol_counts(data: np.ndarray) -> np.ndarray:
    """Occurrences of each symbol, indexed by symbol - 1."""
    return np.bincount(data - 1, minlength=ALPHABET_SIZE)[:ALPHABET_SIZE]


def dirichlet_kl(
    alpha: np.ndarray, functions: SpecialFunctions = APPROXIMATE
) -> float:
    """
    KL(Dir(alpha) || Dir(1, 1, 1, 1)) in closed form.

    Uses whichever log-gamma/digamma pair is supplied; the default
    approximations reproduce the historical ELBO values.
    """
    prior = np.ones(ALPHABET_SIZE)
    total_alpha = float(np.sum(alpha))
    total_prior = float(np.sum(prior))

    kl = float(functions.log_gamma(total_alpha) - functions.log_gamma(total_prior))
    kl += float(np.sum(functions.log_gamma(prior) - functions.log_gamma(alpha)))
    kl += float(
        np.sum(
            (alpha - prior)
            * (functions.digamma(alpha) - functions.digamma(total_alpha))
        )
    )
    return kl


def update_parameters(
    data: np.ndarray,
    state: VariationalState,
    learning_rate: float,
    sigma_floor: float,
    functions: SpecialFunctions = APPROXIMATE,
) -> None:
    """One coordinate-ascent step; all alpha components use the old alpha."""
    counts = symbol_counts(data)

    score = functions.digamma(np.sum(state.alpha)) - functions.digamma(state.alpha)
    gradient = counts * score + 1
    new_alpha = state.alpha + learning_rate * gradient

    for index in range(ALPHABET_SIZE):
        values = data[data == index + 1]
        if values.size == 0:
            continue
        state.mu[index] = float(np.mean(values))
        spread = float(np.std(values, ddof=1)) if values.size > 1 else 0.0
        state.sigma[index] = max(sigma_floor, spread)

    state.alpha = new_alpha


def run_variational_inference(
    sequence: SymbolSequence, config: Optional[VariationalConfig] = None
) -> Posterior:
    """
    Fit the variational posterior.

    Stops when the ELBO (negative Dirichlet KL to the symmetric prior) moves
    by less than the tolerance, or when the iteration budget runs out. On
    convergence the reported ELBO and iteration count are those recorded
    before the converging step.

    Args:
        sequence: Observed symbols (any length)
        config: Optimization settings

    Returns:
        Posterior; deterministic for a given input
    """
    config = config or VariationalConfig()
    functions = EXACT if config.exact_special_functions else APPROXIMATE
    data = np.asarray(sequence, dtype=np.int64)
    state = VariationalState()

    elbo_old = float("-inf")
    converged = False
    iterations = 0

    for iteration in range(config.max_iterations):
        update_parameters(
            data, state, config.learning_rate, config.sigma_floor, functions
        )
        elbo = -dirichlet_kl(state.alpha, functions)

        if abs(elbo - elbo_old) < config.tolerance:
            converged = True
            break

        elbo_old = elbo
        iterations = iteration + 1

    total_alpha = float(np.sum(state.alpha))
    probabilities = state.alpha / total_alpha
    uncertainty = state.sigma * np.sqrt(state.alpha)

    return Posterior(
        symbol_probabilities=tuple(float(p) for p in probabilities),
        uncertainty=tuple(float(u) for u in uncertainty),
        concentration=tuple(float(a) for a in state.alpha),
        means=tuple(float(m) for m in state.mu),
        elbo=elbo_old,
        iterations=iterations,
        converged=converged,
    )


class VariationalEngine:
    """
    Dirichlet variational inference over symbol frequencies.
    """

    name = "variational"

    def __init__(self, config: Optional[VariationalConfig] = None):
        self.config = config or VariationalConfig()

    def fit(self, sequence: SymbolSequence) -> VariationalResult:
        """
        Run inference and predict the most probable symbol.

        Raises:
            InsufficientDataError: If the sequence is too short
        """
        if len(sequence) < self.config.min_symbols:
            raise InsufficientDataError("VI", self.config.min_symbols, len(sequence))

        posterior = run_variational_inference(sequence, self.config)
        probabilities = posterior.symbol_probabilities
        best = max(probabilities)
        prediction = ModelPrediction(
            next_symbol=probabilities.index(best) + 1,
            confidence=min(best, 1.0),
        )

        logger.debug(
            "VI finished after %d iterations (converged=%s, elbo=%.6f)",
            posterior.iterations,
            posterior.converged,
            posterior.elbo,
        )

        return VariationalResult(
            posterior=posterior,
            prediction=prediction,
            total_symbols=len(sequence),
        )

    def analyze(
        self, sequence: Iterable[int], window: Optional[int] = None
    ) -> AnalysisOutcome[VariationalResult]:
        """
        Analyze the sequence, or its trailing window.

        Returns:
            Outcome with a VariationalResult, or an insufficient-data error tag
        """
        symbols = trailing_window(validate_sequence(sequence), window)
        try:
            return AnalysisOutcome.success(self.fit(symbols))
        except InsufficientDataError as e:
            logger.debug("VI analysis skipped: %s", e)
            return AnalysisOutcome.insufficient(e)
