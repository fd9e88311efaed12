"""Random keys and indexing shared by the samplers."""

import jax
import numpy as np


class JAXRNG:
    """Hands out a fresh JAX key on every access to `key`,
    so that a Python-level driver never reuses randomness
    between the initialisation and consecutive Gibbs steps.

    Example:
      rng = JAXRNG(jax.random.PRNGKey(5))
      rho = sample_rho(rng.key, gamma, p=3, a_rho=0.5, b_rho=0.5)
      tau = sample_tau(rng.key, a=0.3, gamma=1, a_tau=0.1, b_tau=0.1, nu_1=1e-4)
    """

    def __init__(self, key: jax.Array) -> None:
        """
        Args:
            key: key from which all the subsequent keys are split
        """
        self._key = key

    @property
    def key(self) -> jax.Array:
        """Splits off a key which has not been used before."""
        key, subkey = jax.random.split(self._key)
        self._key = key
        return subkey

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._key})"


def off_diagonal_indices(m: int) -> tuple[np.ndarray, np.ndarray]:
    """Row and column indices of the off-diagonal entries
    of an `(m, m)` matrix, in row-major order."""
    rows, cols = np.nonzero(~np.eye(m, dtype=bool))
    return rows, cols
