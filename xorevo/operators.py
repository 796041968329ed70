"""Genetic operators: perturbation mutation, splice crossover, tournament selection."""
from __future__ import annotations

from typing import Optional, Tuple
import numpy as np

from .exceptions import ConfigurationError

MUTATION = "mutation"
CROSSOVER = "crossover"


def mutate(genome: np.ndarray,
           rate: float,
           perturbation_scale: float,
           rng: np.random.Generator,
           bounds: Optional[Tuple[float, float]] = None) -> np.ndarray:
    """Copy of ``genome`` with small uniform jitter added to some genes.

    Each gene is perturbed with probability ``rate`` by a value drawn from
    ``[-perturbation_scale, perturbation_scale]``.
    """
    individual = np.array(genome, dtype=float, copy=True)
    if rate <= 0.0:
        return individual
    mask = rng.random(individual.shape[0]) < rate
    noise = rng.uniform(-perturbation_scale, perturbation_scale, size=individual.shape[0])
    individual[mask] += noise[mask]
    if bounds is not None:
        np.clip(individual, bounds[0], bounds[1], out=individual)
    return individual


def crossover(parent_a: np.ndarray,
              parent_b: np.ndarray,
              split_point: int) -> Tuple[np.ndarray, np.ndarray]:
    """Splice two parents at ``split_point``.

    ``child_a`` takes ``[0, split_point)`` from ``parent_a`` and the rest from
    ``parent_b``; ``child_b`` is the complement. A split at either end yields
    plain copies.
    """
    parent_a = np.asarray(parent_a, dtype=float)
    parent_b = np.asarray(parent_b, dtype=float)
    if parent_a.shape != parent_b.shape or parent_a.ndim != 1:
        raise ConfigurationError(
            f"Parents must be flat genomes of equal length, got {parent_a.shape} and {parent_b.shape}"
        )
    size = parent_a.shape[0]
    if not 0 <= split_point <= size:
        raise ConfigurationError(f"split_point {split_point} outside [0, {size}]")

    child_a = np.concatenate((parent_a[:split_point], parent_b[split_point:]))
    child_b = np.concatenate((parent_b[:split_point], parent_a[split_point:]))
    return child_a, child_b


def tournament_select(fitness: np.ndarray, rounds: int, rng: np.random.Generator) -> int:
    """Index of the lowest-scoring genome among ``rounds`` random draws."""
    indices = rng.integers(0, len(fitness), size=rounds)
    return int(indices[np.argmin(fitness[indices])])


def operator_probabilities(mutation_rate: float, crossover_rate: float) -> Tuple[Tuple[str, ...], np.ndarray]:
    weights = np.array([mutation_rate, crossover_rate], dtype=float)
    total = weights.sum()
    if total <= 0.0:
        raise ConfigurationError("At least one genetic operator needs a positive rate")
    return (MUTATION, CROSSOVER), weights / total
