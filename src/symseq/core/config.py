"""
SYMSEQ Configuration Management

Provides centralized configuration for every analysis model, with validation
and environment support.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LCG_CATALOG: List[Tuple[int, int, int]] = [
    (1597, 51749, 244944),
    (1664525, 1013904223, 2**32),
    (22695477, 1, 2**32),
    (69069, 1, 2**32),
]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_file_size: int = Field(
        default=10_000_000, description="Max log file size in bytes"
    )
    backup_count: int = Field(default=5, description="Number of backup log files")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class EntropyConfig(BaseModel):
    """Entropy estimator configuration."""

    window_size: int = Field(default=5, ge=1, description="Sliding window size")
    trend_margin: float = Field(
        default=5.0, ge=0, description="Entropy points needed to call a trend"
    )


class MarkovConfig(BaseModel):
    """Markov model configuration."""

    min_symbols: int = Field(default=2, ge=2, description="Minimum sequence length")


class PatternConfig(BaseModel):
    """Pattern miner configuration."""

    min_length: int = Field(default=2, ge=1, description="Shortest pattern length")
    max_length: int = Field(default=4, ge=1, description="Longest pattern length")
    top_k: int = Field(default=5, ge=1, description="Number of patterns reported")

    @model_validator(mode="after")
    def validate_bounds(self) -> "PatternConfig":
        if self.min_length > self.max_length:
            raise ValueError(
                f"min_length ({self.min_length}) cannot exceed max_length ({self.max_length})"
            )
        return self


class SeedSearchConfig(BaseModel):
    """Generator-seed search configuration."""

    catalog: List[Tuple[int, int, int]] = Field(
        default_factory=lambda: list(DEFAULT_LCG_CATALOG),
        description="LCG (multiplier, increment, modulus) triples to search",
    )
    seed_min: int = Field(default=1, ge=0, description="First seed tried")
    seed_max: int = Field(default=999, ge=0, description="Last seed tried")
    lookahead: int = Field(default=5, ge=0, description="Symbols predicted ahead")
    min_symbols: int = Field(default=10, ge=1, description="Minimum sequence length")
    critical_value: float = Field(
        default=7.815, gt=0, description="Chi-square critical value (df=3, p=0.05)"
    )
    max_workers: int = Field(
        default=1, ge=1, description="Threads used to score catalog entries"
    )

    @field_validator("catalog")
    @classmethod
    def validate_catalog(cls, v: List[Tuple[int, int, int]]) -> List[Tuple[int, int, int]]:
        if not v:
            raise ValueError("LCG catalog cannot be empty")
        for multiplier, increment, modulus in v:
            if modulus <= 0:
                raise ValueError(f"LCG modulus must be positive, got {modulus}")
        return v

    @model_validator(mode="after")
    def validate_seed_range(self) -> "SeedSearchConfig":
        if self.seed_min > self.seed_max:
            raise ValueError("seed_min cannot exceed seed_max")
        return self


class VariationalConfig(BaseModel):
    """Variational inference configuration."""

    max_iterations: int = Field(default=100, ge=1, description="Iteration budget")
    tolerance: float = Field(default=1e-4, gt=0, description="ELBO convergence tolerance")
    learning_rate: float = Field(default=0.01, gt=0, description="Dirichlet step size")
    sigma_floor: float = Field(default=0.1, gt=0, description="Minimum Gaussian spread")
    min_symbols: int = Field(default=10, ge=1, description="Minimum sequence length")
    exact_special_functions: bool = Field(
        default=False,
        description="Use scipy gammaln/digamma instead of the Stirling approximations",
    )


class HiddenStateConfig(BaseModel):
    """Two-state hidden model configuration."""

    recent_window: int = Field(default=20, ge=1, description="Recent symbols used")
    min_symbols: int = Field(default=5, ge=1, description="Minimum sequence length")
    pattern_threshold: float = Field(
        default=0.4, ge=0, le=1, description="Pattern strength needed for confidence"
    )
    base_confidence: float = Field(default=0.25, ge=0, le=1)


class EnsembleConfig(BaseModel):
    """Ensemble combiner configuration."""

    weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "markov": 0.3,
            "monte_carlo": 0.3,
            "variational": 0.4,
        },
        description="Static per-model weights",
    )
    placeholder_confidence: float = Field(default=0.25, ge=0, le=1)
    fuse: bool = Field(
        default=False, description="Also compute a weighted-vote fused prediction"
    )

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        if not v:
            raise ValueError("At least one model weight is required")
        for name, weight in v.items():
            if weight < 0:
                raise ValueError(f"Weight for {name} cannot be negative")
        return v


class AnalyzerConfig(BaseModel):
    """Fan-out orchestration configuration."""

    max_workers: int = Field(default=6, ge=1, description="Parallel model branches")
    timeout: Optional[float] = Field(
        default=None, gt=0, description="Default timeout in seconds for a full analysis"
    )


class SymseqConfig(BaseSettings):
    """Main SYMSEQ configuration."""

    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    entropy: EntropyConfig = Field(default_factory=EntropyConfig)
    markov: MarkovConfig = Field(default_factory=MarkovConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    seed_search: SeedSearchConfig = Field(default_factory=SeedSearchConfig)
    variational: VariationalConfig = Field(default_factory=VariationalConfig)
    hidden_state: HiddenStateConfig = Field(default_factory=HiddenStateConfig)
    ensemble: EnsembleConfig = Field(default_factory=EnsembleConfig)
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)

    model_config = SettingsConfigDict(
        env_prefix="SYMSEQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
    )


# Global configuration instance
_config: Optional[SymseqConfig] = None


def get_config() -> SymseqConfig:
    """
    Get the global configuration instance.

    Returns:
        The global SymseqConfig instance
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def load_config(config_file: Optional[Path] = None) -> SymseqConfig:
    """
    Load configuration from an env file and environment variables.

    Args:
        config_file: Optional path to a dotenv-style configuration file

    Returns:
        Loaded configuration instance
    """
    if config_file and config_file.exists():
        return SymseqConfig(_env_file=str(config_file))
    return SymseqConfig()


def reload_config(config_file: Optional[Path] = None) -> SymseqConfig:
    """
    Reload the global configuration.

    Args:
        config_file: Optional path to configuration file

    Returns:
        Reloaded configuration instance
    """
    global _config
    _config = load_config(config_file)
    return _config


def update_config(**kwargs: Any) -> None:
    """
    Update configuration values at runtime.

    Args:
        **kwargs: Configuration values to update
    """
    global _config
    if _config is None:
        _config = load_config()

    for key, value in kwargs.items():
        if hasattr(_config, key):
            setattr(_config, key, value)
        else:
            raise ValueError(f"Unknown configuration key: {key}")
