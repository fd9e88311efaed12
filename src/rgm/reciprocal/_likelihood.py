"""Likelihood of the reciprocal graphical model and the noise precision update.

The model is

.. math::

   (I - A) y_n = B x_n + e_n, \\quad e_n \\sim N(0, \\mathrm{diag}(\\sigma^2))

so that for each node :math:`j` the residuals are the `j`th row of
:math:`(I-A)Y^T - BX^T`.
"""
import jax
import jax.numpy as jnp
from jax import random

from jaxtyping import Array, Float


def residuals(
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
) -> Float[Array, "G N"]:
    """Calculates the residual matrix :math:`(I-A)Y^T - BX^T`."""
    G = A.shape[0]
    return jnp.einsum("gh,nh->gn", jnp.eye(G) - A, Y) - jnp.einsum("gk,nk->gn", B, X)


def residual_sum_of_squares(
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
) -> Float[Array, " G"]:
    """Sum of squared residuals for each node."""
    return jnp.sum(jnp.square(residuals(A=A, B=B, X=X, Y=Y)), axis=1)


@jax.jit
def log_likelihood(
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
    sigma_inv: Float[Array, " G"],
) -> Float[Array, ""]:
    """Log-likelihood of the observed `Y` given covariates `X`.

    Args:
        A: gene-gene interaction matrix with zero diagonal
        B: gene-covariate interaction matrix
        X: covariates, shape (n_points, n_covariates)
        Y: node values, shape (n_points, n_nodes)
        sigma_inv: noise precision of each node

    Note:
        The Jacobian term :math:`N \\log |\\det(I - A)|` is included,
        so the values are comparable between different `A`.
    """
    N, G = Y.shape
    _, logabsdet = jnp.linalg.slogdet(jnp.eye(G) - A)
    rss = residual_sum_of_squares(A=A, B=B, X=X, Y=Y)
    return (
        N * logabsdet
        + 0.5 * N * jnp.sum(jnp.log(sigma_inv))
        - 0.5 * jnp.sum(sigma_inv * rss)
        - 0.5 * N * G * jnp.log(2 * jnp.pi)
    )


@jax.jit
def sample_sigma_inv(
    key: jax.Array,
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
    a_sigma: float,
    b_sigma: float,
) -> Float[Array, " G"]:
    """Samples the noise precisions :math:`1/\\sigma_j^2`.

    With the prior :math:`\\sigma^2_j \\sim InvGamma(a, b)` the precision
    has the full conditional :math:`Gamma(a + N/2, b + RSS_j/2)`
    (shape and *rate*).
    """
    N = Y.shape[0]
    rss = residual_sum_of_squares(A=A, B=B, X=X, Y=Y)

    posterior_shape = a_sigma + 0.5 * N
    posterior_rate: Float[Array, " G"] = b_sigma + 0.5 * rss

    return random.gamma(key, posterior_shape, shape=rss.shape) / posterior_rate
