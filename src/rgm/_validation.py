"""Eager checks of concrete (non-traced) inputs.

JIT-compiled kernels cannot raise on traced values, so the public
samplers run these checks in Python before dispatching to JAX.
"""
import math
from typing import Optional

import numpy as np

from rgm.errors import (
    DimensionMismatchError,
    InvalidHyperparameterError,
    NumericalDegeneracyError,
)


def _as_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidHyperparameterError(
            f"{name} has to be a real number, but is {value!r}."
        ) from e


def check_positive(**hyperparameters) -> None:
    """Checks that every keyword argument is a strictly positive, finite number.

    Raises:
        InvalidHyperparameterError, naming the first offending parameter
    """
    for name, value in hyperparameters.items():
        x = _as_float(name, value)
        if not math.isfinite(x) or x <= 0:
            raise InvalidHyperparameterError(
                f"The {name} value has to be positive and finite, but is {value}."
            )


def check_finite(**values) -> None:
    """Checks that every keyword argument is a finite real number.

    Raises:
        NumericalDegeneracyError, as non-finite state values
          make the posterior parameters degenerate
    """
    for name, value in values.items():
        x = _as_float(name, value)
        if not math.isfinite(x):
            raise NumericalDegeneracyError(f"The {name} value is not finite: {value}.")


def check_posterior(**parameters) -> None:
    """Checks that the posterior parameters are positive and finite.

    Raises:
        NumericalDegeneracyError
    """
    for name, value in parameters.items():
        x = float(value)
        if not math.isfinite(x) or x <= 0:
            raise NumericalDegeneracyError(
                f"Posterior parameter {name} has to be positive and finite, "
                f"but is {x}."
            )


def check_count(name: str, value) -> int:
    """Checks that `value` is a non-negative integer (possibly stored as float).

    Raises:
        DimensionMismatchError
    """
    x = float(value)
    if not math.isfinite(x) or x < 0 or x != round(x):
        raise DimensionMismatchError(
            f"The {name} value has to be a non-negative integer, but is {value}."
        )
    return int(round(x))


def as_matrix(
    name: str, matrix, shape: Optional[tuple[int, int]] = None
) -> np.ndarray:
    """Converts `matrix` to a two-dimensional NumPy array
    and optionally checks its shape.

    Raises:
        DimensionMismatchError, if the array is not two-dimensional
          or has a shape different from `shape`
    """
    array = np.asarray(matrix, dtype=float)
    if array.ndim != 2:
        raise DimensionMismatchError(
            f"{name} has to be a matrix, but has shape {array.shape}."
        )
    if shape is not None and array.shape != tuple(shape):
        raise DimensionMismatchError(
            f"{name} has to have shape {tuple(shape)}, but has {array.shape}."
        )
    if not np.all(np.isfinite(array)):
        raise NumericalDegeneracyError(f"{name} contains non-finite entries.")
    return array


def check_unit_interval(name: str, array: np.ndarray) -> None:
    """Checks that all the entries of an indicator matrix lie in [0, 1].

    Raises:
        DimensionMismatchError, as entries outside [0, 1]
          do not count edges
    """
    if np.any((array < 0) | (array > 1)):
        raise DimensionMismatchError(
            f"All entries of {name} have to lie in [0, 1], "
            f"but they range from {array.min()} to {array.max()}."
        )
