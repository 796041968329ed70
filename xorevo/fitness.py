"""RMSE objective of a genome over the XOR truth table."""
from __future__ import annotations

import numpy as np

from .exceptions import EvaluationError
from .network import XOR_IDEALS, XOR_INPUTS, feedforward_population


class XorObjective:
    """Scores genomes by root-mean-square error against XOR; lower is better.

    With ``legacy_last_pair=True`` the score reproduces the historical
    behaviour in which the running sum was reset on every input pair, so
    only the last pair contributes: ``sqrt(err_last**2 / 4)``.
    """

    should_minimize = True
    # Scoring is not safe to share across threads: the driver's RNG and
    # population are unguarded.
    require_single_threaded = True

    def __init__(self, legacy_last_pair: bool = False):
        self.legacy_last_pair = bool(legacy_last_pair)
        self.inputs = XOR_INPUTS
        self.ideals = XOR_IDEALS

    def _score(self, outputs: np.ndarray) -> np.ndarray:
        squared = (outputs - self.ideals[None, :]) ** 2
        n_cases = len(self.ideals)
        if self.legacy_last_pair:
            scores = np.sqrt(squared[:, -1] / n_cases)
        else:
            scores = np.sqrt(squared.sum(axis=1) / n_cases)
        if not np.all(np.isfinite(scores)):
            raise EvaluationError("Fitness evaluation produced non-finite values")
        return scores

    def evaluate_population(self, population: np.ndarray) -> np.ndarray:
        return self._score(feedforward_population(population, self.inputs))

    def evaluate(self, genome) -> float:
        genome = np.asarray(genome, dtype=float)
        if genome.ndim != 1:
            raise EvaluationError(f"Expected a flat genome, got shape {genome.shape}")
        return float(self.evaluate_population(genome[None, :])[0])

    __call__ = evaluate
