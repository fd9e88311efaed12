"""Exceptions raised by the samplers.

All of them derive from `RGMError`, so that a Gibbs driver
can decide whether to skip the iteration or abort the chain.
"""


class RGMError(Exception):
    """Base class for all errors raised by this package."""


class InvalidHyperparameterError(RGMError, ValueError):
    """A shape, rate or variance hyperparameter is non-positive
    or non-finite.

    This indicates a configuration bug and should not be retried.
    """


class NumericalDegeneracyError(RGMError, ArithmeticError):
    """A posterior parameter computed from the current state
    (e.g., an inverse gamma rate) is non-positive or non-finite."""


class DimensionMismatchError(RGMError, ValueError):
    """Matrix inputs are inconsistent with the declared dimensions."""
