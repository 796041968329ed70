"""Plain-text reporting of genomes, progress and the learned truth table."""
from __future__ import annotations

from typing import List, Tuple
import numpy as np

from .network import XOR_IDEALS, XOR_INPUTS, XorNetwork


def format_genome(genome) -> str:
    return " ".join(f"{gene:8.4f}" for gene in np.asarray(genome, dtype=float))


def format_progress(generation: int, best_fitness: float, stable_count: int, genome) -> str:
    return f"{generation:3d} {best_fitness:5.2f} {stable_count:5d} {format_genome(genome)}"


def truth_table(genome) -> List[Tuple[float, float, float, float]]:
    """Rows of ``(x1, x2, ideal, predicted)`` for every XOR case."""
    net = XorNetwork()
    net.set_weights(genome)
    predicted = net.forward(XOR_INPUTS)
    return [
        (float(x[0]), float(x[1]), float(t), float(y))
        for x, t, y in zip(XOR_INPUTS, XOR_IDEALS, predicted)
    ]


def format_truth_table(genome) -> str:
    lines = [f"{'x1':>6} {'x2':>6} {'t1':>6} {'y1':>6}"]
    for x1, x2, ideal, predicted in truth_table(genome):
        lines.append(f"{x1:6.4f} {x2:6.4f} {ideal:6.4f} {predicted:6.4f}")
    return "\n".join(lines)


def classification_accuracy(genome) -> float:
    net = XorNetwork()
    net.set_weights(genome)
    return float(np.mean(net.predict(XOR_INPUTS) == XOR_IDEALS.astype(int)))
