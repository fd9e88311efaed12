"""Sampling the slab variances `tau` (gene-gene coefficients)
and `eta` (gene-covariate coefficients).

A coefficient :math:`c` has the spike-and-slab prior

.. math::

   c \\mid s, v \\sim s N(0, v) + (1-s) N(0, \\nu v)

with :math:`v \\sim InvGamma(a, b)`, so that the full conditional is

.. math::

   v \\mid c, s \\sim InvGamma(a + 1/2, b + c^2 / (2 (s + (1-s)\\nu)))
"""
import jax
import jax.numpy as jnp
from jax import random

from jaxtyping import Array, Float, Int

import rgm._validation as val


def sample_inverse_gamma(
    key: jax.Array,
    shape: float,
    scale: Float[Array, " *N"],
) -> Float[Array, " *N"]:
    """Samples from the inverse gamma distribution.

    Args:
        key: JAX random key
        shape: shape parameter of the inverse gamma distribution
        scale: scale parameter of the inverse gamma distribution

    Note that:
        X ~ InvGamma(shape=a, scale=b)
    is equivalent to
        1/X ~ Gamma(shape=a, rate=b)
    """
    scale = jnp.asarray(scale)
    samples_gamma = random.gamma(key, shape, shape=scale.shape)
    return scale * jnp.reciprocal(samples_gamma)


def _posterior_rate(
    coefficient: Float[Array, " *N"],
    indicator: Float[Array, " *N"],
    prior_rate: float,
    nu: float,
) -> Float[Array, " *N"]:
    """Rate (scale) of the inverse gamma full conditional."""
    scaling = indicator + (1 - indicator) * nu
    return prior_rate + 0.5 * jnp.square(coefficient) / scaling


@jax.jit
def sample_slab_variance(
    key: jax.Array,
    coefficient: Float[Array, " *N"],
    indicator: Float[Array, " *N"],
    prior_shape: float,
    prior_rate: float,
    nu: float,
) -> Float[Array, " *N"]:
    """Vectorized full conditional of the slab variance.
    No input checks are performed."""
    return sample_inverse_gamma(
        key,
        shape=prior_shape + 0.5,
        scale=_posterior_rate(coefficient, indicator, prior_rate, nu),
    )


@jax.jit
def sample_tau_matrix(
    key: jax.Array,
    a: Float[Array, "G G"],
    gamma: Int[Array, "G G"],
    a_tau: float,
    b_tau: float,
    nu_1: float,
) -> Float[Array, "G G"]:
    """Samples all the gene-gene slab variances at once.

    Returns:
        matrix of shape (G, G) with zero diagonal
    """
    G = a.shape[0]
    off_diagonal = 1.0 - jnp.eye(G)
    tau = sample_slab_variance(
        key,
        coefficient=a,
        indicator=gamma,
        prior_shape=a_tau,
        prior_rate=b_tau,
        nu=nu_1,
    )
    return tau * off_diagonal


@jax.jit
def sample_eta_matrix(
    key: jax.Array,
    b: Float[Array, "G K"],
    phi: Int[Array, "G K"],
    mask: Int[Array, "G K"],
    a_eta: float,
    b_eta: float,
    nu_2: float,
) -> Float[Array, "G K"]:
    """Samples all the gene-covariate slab variances at once.

    Args:
        mask: indicator matrix `D`. Entries with zero mask are set to 0.
    """
    eta = sample_slab_variance(
        key,
        coefficient=b,
        indicator=phi,
        prior_shape=a_eta,
        prior_rate=b_eta,
        nu=nu_2,
    )
    return jnp.where(mask != 0, eta, 0.0)


def _sample_scalar_variance(
    key: jax.Array,
    coefficient: float,
    indicator: float,
    prior_shape: float,
    prior_rate: float,
    nu: float,
) -> Float[Array, ""]:
    val.check_finite(coefficient=coefficient, indicator=indicator)

    rate = float(
        _posterior_rate(
            jnp.asarray(coefficient, dtype=float),
            jnp.asarray(indicator, dtype=float),
            float(prior_rate),
            float(nu),
        )
    )
    val.check_posterior(shape=prior_shape + 0.5, rate=rate)

    sample = sample_slab_variance(
        key,
        coefficient=jnp.asarray(coefficient, dtype=float),
        indicator=jnp.asarray(indicator, dtype=float),
        prior_shape=float(prior_shape),
        prior_rate=float(prior_rate),
        nu=float(nu),
    )
    val.check_posterior(variance=sample)
    return sample


def sample_eta(
    key: jax.Array,
    b: float,
    phi: float,
    a_eta: float,
    b_eta: float,
    nu_2: float,
) -> Float[Array, ""]:
    """Samples the slab variance of a gene-covariate coefficient
    from its full conditional

    .. math::

       \\eta \\sim InvGamma(a_\\eta + 1/2, b_\\eta + b^2 / (2(\\phi + (1-\\phi)\\nu_2)))

    Args:
        key: JAX random key. Exactly one key is consumed
        b: current value of the coefficient
        phi: current value of the link indicator
        a_eta: shape of the inverse gamma prior
        b_eta: scale of the inverse gamma prior
        nu_2: spike-to-slab variance ratio

    Returns:
        strictly positive sample

    Raises:
        InvalidHyperparameterError: if `a_eta`, `b_eta` or `nu_2` is not positive
        NumericalDegeneracyError: if the posterior rate or the sample
          is not positive and finite
    """
    val.check_positive(a_eta=a_eta, b_eta=b_eta, nu_2=nu_2)
    return _sample_scalar_variance(
        key,
        coefficient=b,
        indicator=phi,
        prior_shape=a_eta,
        prior_rate=b_eta,
        nu=nu_2,
    )


def sample_tau(
    key: jax.Array,
    a: float,
    gamma: float,
    a_tau: float,
    b_tau: float,
    nu_1: float,
) -> Float[Array, ""]:
    """Samples the slab variance of a gene-gene coefficient.

    Mirrors `sample_eta` for the coefficient `a`, its edge
    indicator `gamma` and the hyperparameters `a_tau`, `b_tau`, `nu_1`.

    Raises:
        InvalidHyperparameterError: if `a_tau`, `b_tau` or `nu_1` is not positive
        NumericalDegeneracyError: if the posterior rate or the sample
          is not positive and finite
    """
    val.check_positive(a_tau=a_tau, b_tau=b_tau, nu_1=nu_1)
    return _sample_scalar_variance(
        key,
        coefficient=a,
        indicator=gamma,
        prior_shape=a_tau,
        prior_rate=b_tau,
        nu=nu_1,
    )
