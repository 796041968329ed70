"""Fixed 2-2-1 sigmoid network whose parameters are evolved.

Genes are laid out as ``[w1, w2, w3, w4, w5, w6, b1, b2]``:

* hidden unit 1: ``sigmoid(w1*x1 + w3*x2 + b1)``
* hidden unit 2: ``sigmoid(w2*x1 + w4*x2 + b1)``
* output:        ``sigmoid(w5*h1 + w6*h2 + b2)``

Both hidden units share the bias ``b1``.
"""
from __future__ import annotations

import numpy as np

from .exceptions import EvaluationError

NUM_WEIGHTS = 8

XOR_INPUTS = np.array([[0.0, 0.0],
                       [1.0, 0.0],
                       [0.0, 1.0],
                       [1.0, 1.0]])
XOR_IDEALS = np.array([0.0, 1.0, 1.0, 0.0])


def sigmoid(x):
    return 1.0 / (1.0 + np.exp(-x))


def _as_weights(genome) -> np.ndarray:
    weights = np.asarray(genome, dtype=float)
    if weights.ndim != 1 or weights.shape[0] != NUM_WEIGHTS:
        raise EvaluationError(
            f"Expected a flat genome of {NUM_WEIGHTS} weights, got shape {weights.shape}"
        )
    return weights


def feedforward(x1: float, x2: float, genome) -> float:
    """Network output for a single input pair."""
    w1, w2, w3, w4, w5, w6, b1, b2 = _as_weights(genome)
    h1 = sigmoid(w1 * x1 + w3 * x2 + b1)
    h2 = sigmoid(w2 * x1 + w4 * x2 + b1)
    return float(sigmoid(h1 * w5 + h2 * w6 + b2))


def feedforward_population(population: np.ndarray, inputs: np.ndarray = XOR_INPUTS) -> np.ndarray:
    """Outputs of every genome on every input pair, shape ``(n_genomes, n_inputs)``."""
    population = np.asarray(population, dtype=float)
    if population.ndim != 2 or population.shape[1] != NUM_WEIGHTS:
        raise EvaluationError(
            f"Expected a population of shape (n, {NUM_WEIGHTS}), got {population.shape}"
        )
    inputs = np.asarray(inputs, dtype=float)
    w1, w2, w3, w4, w5, w6, b1, b2 = (population[:, [k]] for k in range(NUM_WEIGHTS))
    x1 = inputs[:, 0][None, :]
    x2 = inputs[:, 1][None, :]

    h1 = sigmoid(w1 * x1 + w3 * x2 + b1)
    h2 = sigmoid(w2 * x1 + w4 * x2 + b1)
    return sigmoid(h1 * w5 + h2 * w6 + b2)


class XorNetwork:
    """Stateful wrapper around one genome, mirroring a fixed-topology MLP."""

    total_weights = NUM_WEIGHTS

    def set_weights(self, flat_weights):
        if len(flat_weights) != self.total_weights:
            raise EvaluationError(f"Expected {self.total_weights} weights, got {len(flat_weights)}")
        self.weights = np.array(flat_weights, dtype=float)

    def get_weights(self):
        if not hasattr(self, 'weights'):
            raise AttributeError("Weights not initialized. Call set_weights() first.")
        return self.weights.copy()

    def forward(self, X):
        if not hasattr(self, 'weights'):
            raise AttributeError("Weights not initialized. Call set_weights() first.")

        single_sample = False
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)
            single_sample = True

        out = feedforward_population(self.weights[None, :], X)[0]
        if single_sample:
            return float(out[0])
        return out

    def predict(self, X):
        """Boolean decision at the 0.5 threshold."""
        output = np.atleast_1d(self.forward(X))
        return (output >= 0.5).astype(int)
