"""
Pytest configuration and shared fixtures for SYMSEQ tests.
"""

import random
from typing import List

import pytest

from symseq.core.config import SymseqConfig


@pytest.fixture
def test_config() -> SymseqConfig:
    """Provide a test configuration with a reduced seed range."""
    return SymseqConfig(
        environment="test",
        debug=True,
        seed_search={"seed_min": 1, "seed_max": 50},
        logging={"level": "DEBUG"},
    )


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source."""
    return random.Random(1234)


@pytest.fixture
def random_sequence(rng: random.Random) -> List[int]:
    """Provide 60 pseudo-random symbols."""
    return [rng.randint(1, 4) for _ in range(60)]


@pytest.fixture
def balanced_sequence() -> List[int]:
    """Provide 100 symbols with every symbol seen exactly 25 times."""
    return [1, 2, 3, 4] * 25


@pytest.fixture
def alternating_sequence() -> List[int]:
    """Provide [1, 2, 1, 2, ...] ending in 2."""
    return [1, 2] * 10
