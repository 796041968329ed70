"""Project-wide configuration constants and the GA run configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Optional, Tuple
import os

from .exceptions import ConfigurationError

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
RESULTS_DIR: Final[str] = os.path.join(ROOT, 'results')
RANDOM_SEED: Final[int] = 42

POPULATION_SIZE: Final[int] = 10000
GENOME_SIZE: Final[int] = 8
RANGE_MIN: Final[float] = -10.0
RANGE_MAX: Final[float] = 10.0

# Operator weights, normalized into selection probabilities per offspring.
MUTATION_RATE: Final[float] = 0.01
CROSSOVER_RATE: Final[float] = 0.9

GENE_MUTATION_RATE: Final[float] = 1.0
PERTURBATION_SCALE: Final[float] = 0.001

TOLERANCE: Final[float] = 0.01
MAX_SAME_COUNT: Final[int] = 100

ELITE_RATE: Final[float] = 0.3
TOURNAMENT_ROUNDS: Final[int] = 4


@dataclass
class GAConfig:
    """Parameters of one evolution run."""

    population_size: int = POPULATION_SIZE
    genome_size: int = GENOME_SIZE
    weight_range: Tuple[float, float] = field(default=(RANGE_MIN, RANGE_MAX))
    mutation_rate: float = MUTATION_RATE
    gene_mutation_rate: float = GENE_MUTATION_RATE
    perturbation_scale: float = PERTURBATION_SCALE
    crossover_rate: float = CROSSOVER_RATE
    split_point: Optional[int] = None
    tolerance: float = TOLERANCE
    max_same_count: int = MAX_SAME_COUNT
    elite_rate: float = ELITE_RATE
    tournament_rounds: int = TOURNAMENT_ROUNDS
    legacy_fitness: bool = False
    max_generations: Optional[int] = None

    def __post_init__(self):
        if self.split_point is None and self.genome_size > 0:
            self.split_point = self.genome_size // 2
        self.weight_range = (float(self.weight_range[0]), float(self.weight_range[1]))

    @property
    def range_min(self) -> float:
        return self.weight_range[0]

    @property
    def range_max(self) -> float:
        return self.weight_range[1]

    def validate(self) -> "GAConfig":
        """Raise ConfigurationError on the first invalid field, else return self."""
        if self.genome_size <= 0:
            raise ConfigurationError(f"genome_size must be positive, got {self.genome_size}")
        if self.population_size <= 0:
            raise ConfigurationError(f"population_size must be positive, got {self.population_size}")
        if not 0 < self.split_point < self.genome_size:
            raise ConfigurationError(
                f"split_point must lie in (0, {self.genome_size}), got {self.split_point}"
            )
        if not self.range_min < self.range_max:
            raise ConfigurationError(f"Empty weight range {self.weight_range}")
        for name in ("mutation_rate", "crossover_rate", "gene_mutation_rate", "elite_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
        if self.mutation_rate + self.crossover_rate <= 0.0:
            raise ConfigurationError("At least one genetic operator needs a positive rate")
        if self.elite_rate >= 1.0:
            raise ConfigurationError("elite_rate must leave room for offspring")
        if self.perturbation_scale < 0.0:
            raise ConfigurationError(f"perturbation_scale must be non-negative, got {self.perturbation_scale}")
        if self.tolerance <= 0.0:
            raise ConfigurationError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_same_count <= 0:
            raise ConfigurationError(f"max_same_count must be positive, got {self.max_same_count}")
        if self.tournament_rounds <= 0:
            raise ConfigurationError(f"tournament_rounds must be positive, got {self.tournament_rounds}")
        if self.max_generations is not None and self.max_generations <= 0:
            raise ConfigurationError(f"max_generations must be positive, got {self.max_generations}")
        return self
