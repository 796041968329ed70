"""Genetic-algorithm training of a 2-2-1 sigmoid network on XOR."""

from .config import GAConfig  # noqa: F401
from .exceptions import ConfigurationError, EvaluationError, XorEvoError  # noqa: F401
from .fitness import XorObjective  # noqa: F401
from .genetic_algorithm import (  # noqa: F401
    ConvergenceMonitor,
    EvolutionResult,
    GeneticAlgorithm,
    RunStatus,
)
from .network import XorNetwork, feedforward, sigmoid  # noqa: F401
