"""Generational genetic algorithm evolving the XOR network weights."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple
import logging
import math
import time

import numpy as np

from .config import GAConfig
from .exceptions import ConfigurationError, EvaluationError
from .fitness import XorObjective
from .genome import initialize_population, make_rng
from .operators import (
    CROSSOVER,
    crossover,
    mutate,
    operator_probabilities,
    tournament_select,
)
from .report import format_genome, format_progress

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, float, int, str], None]


class MonitorState(Enum):
    RUNNING = "running"
    CONVERGED = "converged"


class RunStatus(Enum):
    CONVERGED = "converged"
    # Generation cap or time limit reached before the stability criterion.
    EXHAUSTED = "exhausted"


class ConvergenceMonitor:
    """Declares convergence once the best fitness stops moving.

    Every update compares the new best fitness with the previous one; a
    change below ``tolerance`` extends the stable streak, anything larger
    resets it. The streak reaching ``max_same_count`` is convergence.
    """

    def __init__(self, tolerance: float = 0.01, max_same_count: int = 100):
        # The comparison is strict, so a zero tolerance could never converge.
        if tolerance <= 0.0:
            raise ConfigurationError(f"tolerance must be positive, got {tolerance}")
        if max_same_count <= 0:
            raise ConfigurationError(f"max_same_count must be positive, got {max_same_count}")
        self.tolerance = float(tolerance)
        self.max_same_count = int(max_same_count)
        self.reset()

    def reset(self) -> None:
        self.last_best_fitness = math.inf
        self.stable_count = 0
        self.state = MonitorState.RUNNING

    @property
    def converged(self) -> bool:
        return self.state is MonitorState.CONVERGED

    def update(self, best_fitness: float) -> bool:
        if abs(self.last_best_fitness - best_fitness) < self.tolerance:
            self.stable_count += 1
        else:
            self.stable_count = 0
        self.last_best_fitness = best_fitness

        if self.stable_count >= self.max_same_count:
            self.state = MonitorState.CONVERGED
        return self.converged


@dataclass
class GAHistory:
    generations: List[int] = field(default_factory=list)
    best_fitness: List[float] = field(default_factory=list)
    mean_fitness: List[float] = field(default_factory=list)
    diversity: List[float] = field(default_factory=list)
    stable_count: List[int] = field(default_factory=list)
    best_individual_history: List[np.ndarray] = field(default_factory=list)
    gene_mean: List[np.ndarray] = field(default_factory=list)
    gene_std: List[np.ndarray] = field(default_factory=list)


@dataclass
class EvolutionResult:
    best_genome: np.ndarray
    best_fitness: float
    generations: int
    status: RunStatus
    history: GAHistory

    @property
    def converged(self) -> bool:
        return self.status is RunStatus.CONVERGED


class Trainer:
    """Builds one generation from the previous one.

    The best ``elite_rate`` share of the population survives unchanged. The
    remaining slots are filled by picking an operator in proportion to its
    rate, drawing parents by tournament, and applying it.
    """

    def __init__(self, objective: XorObjective, config: GAConfig, rng: np.random.Generator):
        self.objective = objective
        self.config = config
        self.rng = rng
        self.operators, self.operator_probs = operator_probabilities(
            config.mutation_rate, config.crossover_rate
        )

    def _fitness(self, population: np.ndarray, fitness: Optional[np.ndarray]) -> np.ndarray:
        if fitness is None:
            return self.objective.evaluate_population(population)
        return fitness

    def best_of(self, population: np.ndarray,
                fitness: Optional[np.ndarray] = None) -> Tuple[np.ndarray, float]:
        fitness = self._fitness(population, fitness)
        idx = int(np.argmin(fitness))
        return population[idx].copy(), float(fitness[idx])

    def _select(self, population: np.ndarray, fitness: np.ndarray) -> np.ndarray:
        winner = tournament_select(fitness, self.config.tournament_rounds, self.rng)
        return population[winner].copy()

    def next_generation(self, population: np.ndarray,
                        fitness: Optional[np.ndarray] = None) -> np.ndarray:
        fitness = self._fitness(population, fitness)
        size = population.shape[0]
        n_elite = min(int(size * self.config.elite_rate), size)

        sorted_idx = np.argsort(fitness, kind="stable")
        offspring = [genome for genome in population[sorted_idx[:n_elite]].copy()]

        bounds = self.config.weight_range
        while len(offspring) < size:
            operator = self.operators[self.rng.choice(len(self.operators), p=self.operator_probs)]
            if operator == CROSSOVER:
                parent_a = self._select(population, fitness)
                parent_b = self._select(population, fitness)
                offspring.extend(crossover(parent_a, parent_b, self.config.split_point))
            else:
                parent = self._select(population, fitness)
                offspring.append(mutate(parent, self.config.gene_mutation_rate,
                                        self.config.perturbation_scale, self.rng, bounds))

        return np.vstack(offspring)[:size]


class GeneticAlgorithm:
    """Evolves a population of XOR networks until the best fitness settles."""

    def __init__(self,
                 config: Optional[GAConfig] = None,
                 objective: Optional[XorObjective] = None,
                 random_seed: Optional[int] = None):
        self.config = (config or GAConfig()).validate()
        self.objective = objective or XorObjective(legacy_last_pair=self.config.legacy_fitness)
        self.rng = make_rng(random_seed)
        self.trainer = Trainer(self.objective, self.config, self.rng)
        self.monitor = ConvergenceMonitor(self.config.tolerance, self.config.max_same_count)

        self.population = initialize_population(
            self.config.population_size,
            self.config.genome_size,
            self.rng,
            self.config.range_min,
            self.config.range_max,
        )
        self.fitness_scores = np.full(self.config.population_size, np.inf)
        self.generation = 0
        self.history = GAHistory()

    def evaluate_fitness(self) -> None:
        try:
            self.fitness_scores = self.objective.evaluate_population(self.population)
        except EvaluationError as exc:
            logger.error("Fitness evaluation failed at generation %d: %s", self.generation, exc)
            raise ConfigurationError(f"Population cannot be evaluated: {exc}") from exc

    def _record_history(self) -> None:
        best, best_fitness = self.trainer.best_of(self.population, self.fitness_scores)
        self.history.generations.append(self.generation)
        self.history.best_fitness.append(best_fitness)
        self.history.mean_fitness.append(float(np.mean(self.fitness_scores)))
        self.history.diversity.append(float(np.mean(np.std(self.population, axis=0))))
        self.history.stable_count.append(self.monitor.stable_count)
        self.history.best_individual_history.append(best)
        self.history.gene_mean.append(np.mean(self.population, axis=0))
        self.history.gene_std.append(np.std(self.population, axis=0))

    def get_best_individual(self) -> Tuple[np.ndarray, float]:
        return self.trainer.best_of(self.population, self.fitness_scores)

    def step(self) -> float:
        """Run one generation and return the new best fitness."""
        self.population = self.trainer.next_generation(self.population, self.fitness_scores)
        self.generation += 1
        self.evaluate_fitness()
        _, best_fitness = self.get_best_individual()
        self.monitor.update(best_fitness)
        self._record_history()
        return best_fitness

    def run(self,
            max_generations: Optional[int] = None,
            time_limit: Optional[float] = None,
            callback: Optional[ProgressCallback] = None,
            verbose: bool = True) -> EvolutionResult:
        """Evolve until convergence, the generation cap or the time limit.

        Limits are checked between generations only. Without either limit the
        run ends on convergence alone.
        """
        cap = max_generations if max_generations is not None else self.config.max_generations
        if cap is not None and cap <= 0:
            raise ConfigurationError(f"max_generations must be positive, got {cap}")
        deadline = time.monotonic() + time_limit if time_limit is not None else None

        self.monitor.reset()
        logger.info("Starting run: population=%d genome=%d cap=%s",
                    self.config.population_size, self.config.genome_size, cap)

        if self.generation == 0 and not self.history.generations:
            self.evaluate_fitness()
            self._record_history()

        if verbose:
            print(f"{'#':>3} {'y1':>5} {'same':>5} best")

        start_generation = self.generation
        status = None
        while status is None:
            best_fitness = self.step()
            best, _ = self.get_best_individual()
            line = format_progress(self.generation, best_fitness, self.monitor.stable_count, best)
            if verbose:
                print(line)
            if callback is not None:
                callback(self.generation, best_fitness, self.monitor.stable_count, format_genome(best))

            if self.monitor.converged:
                status = RunStatus.CONVERGED
            elif cap is not None and self.generation - start_generation >= cap:
                status = RunStatus.EXHAUSTED
            elif deadline is not None and time.monotonic() >= deadline:
                status = RunStatus.EXHAUSTED

        best, best_fitness = self.get_best_individual()
        if status is RunStatus.CONVERGED:
            logger.info("Converged after %d generations, fitness=%.6f", self.generation, best_fitness)
        else:
            logger.warning("Stopped after %d generations without converging, best effort fitness=%.6f",
                           self.generation, best_fitness)

        return EvolutionResult(
            best_genome=best,
            best_fitness=best_fitness,
            generations=self.generation,
            status=status,
            history=self.history,
        )
