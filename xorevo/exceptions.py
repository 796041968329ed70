"""Exceptions raised by the XOR evolution engine."""


class XorEvoError(Exception):
    """Base class for xorevo errors."""


class ConfigurationError(XorEvoError, ValueError):
    """Invalid run parameters; raised before a run starts."""


class EvaluationError(XorEvoError, ValueError):
    """A genome could not be scored (wrong length, non-finite output)."""
