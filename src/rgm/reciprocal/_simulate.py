"""Simulate data sets from the reciprocal graphical model."""

from jaxtyping import Float, Array

import jax.numpy as jnp
from jax import random


def sample_covariates(
    key,
    n_points: int,
    n_covariates: int,
    low: float = 0.0,
    high: float = 5.0,
) -> Float[Array, "points covariates"]:
    """Samples covariates uniformly from the interval `[low, high]`."""
    return random.uniform(
        key, shape=(n_points, n_covariates), minval=low, maxval=high
    )


def sample_observations(
    key,
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "points K"],
    sigma2: Float[Array, " G"],
) -> Float[Array, "points G"]:
    """Samples node values solving :math:`(I-A)y = Bx + e`.

    Args:
        key: JAX PRNG key
        A: gene-gene interaction matrix, zero diagonal.
            The matrix `I - A` has to be invertible
        B: gene-covariate interaction matrix
        X: covariates
        sigma2: noise variance for each node

    Returns:
        Y matrix, shape (n_points, G)
    """
    N = X.shape[0]
    G = A.shape[0]
    noise = random.normal(key, shape=(N, G)) * jnp.sqrt(sigma2)[None, :]
    # Rows are (Bx_n + e_n)^T, so we solve (I - A) Y^T = B X^T + E^T
    rhs = jnp.einsum("gk,nk->gn", B, X) + noise.T
    return jnp.linalg.solve(jnp.eye(G) - A, rhs).T


def simulate_data(
    key,
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    sigma2: Float[Array, " G"],
    n_points: int,
    covariate_range: tuple[float, float] = (0.0, 5.0),
) -> tuple[Float[Array, "points K"], Float[Array, "points G"]]:
    """Simulates a data set.

    Returns:
        covariates X, shape (n_points, K)
        node values Y, shape (n_points, G)
    """
    key_x, key_y = random.split(key)
    low, high = covariate_range
    X = sample_covariates(key_x, n_points, B.shape[1], low=low, high=high)
    Y = sample_observations(key_y, A=A, B=B, X=X, sigma2=sigma2)
    return X, Y
