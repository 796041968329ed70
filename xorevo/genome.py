"""Genome encoding and random population initialization."""
from __future__ import annotations

from typing import Optional
import numpy as np

from .config import RANGE_MAX, RANGE_MIN
from .exceptions import ConfigurationError


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Return an explicit random generator; ``None`` draws fresh OS entropy."""
    return np.random.default_rng(seed)


def _check_range(range_min: float, range_max: float) -> None:
    if not range_min < range_max:
        raise ConfigurationError(f"Empty weight range [{range_min}, {range_max}]")


def create_random_genome(size: int,
                         rng: np.random.Generator,
                         range_min: float = RANGE_MIN,
                         range_max: float = RANGE_MAX) -> np.ndarray:
    if size <= 0:
        raise ConfigurationError(f"Genome size must be positive, got {size}")
    _check_range(range_min, range_max)
    return rng.uniform(range_min, range_max, size=size)


def initialize_population(population_size: int,
                          genome_size: int,
                          rng: np.random.Generator,
                          range_min: float = RANGE_MIN,
                          range_max: float = RANGE_MAX) -> np.ndarray:
    """Population of ``population_size`` independent random genomes, one per row.

    Drawing the whole matrix at once consumes the generator in the same order
    as calling :func:`create_random_genome` row by row.
    """
    if population_size <= 0:
        raise ConfigurationError(f"Population size must be positive, got {population_size}")
    if genome_size <= 0:
        raise ConfigurationError(f"Genome size must be positive, got {genome_size}")
    _check_range(range_min, range_max)
    return rng.uniform(range_min, range_max, size=(population_size, genome_size))
