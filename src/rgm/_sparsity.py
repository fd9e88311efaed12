"""Sampling the inclusion probabilities `rho` (gene-gene edges)
and `psi` (gene-covariate links).

Both have a Beta prior and the indicator matrices are Bernoulli
given them, so the full conditionals are Beta distributions
parametrized by the number of ones in the indicator matrix.
"""
import jax
import jax.numpy as jnp
from jax import random

from jaxtyping import Array, Float, Int

from rgm.errors import DimensionMismatchError
import rgm._validation as val


@jax.jit
def sample_beta_posterior(
    key: jax.Array,
    n_successes: Float[Array, ""],
    n_trials: Float[Array, ""],
    prior_a: float,
    prior_b: float,
) -> Float[Array, ""]:
    """Samples from the posterior of the Bernoulli success probability,

    .. math::

       Beta(a + k, b + n - k)

    where :math:`k` is the number of successes out of :math:`n` trials.
    """
    posterior_a = prior_a + n_successes
    posterior_b = prior_b + (n_trials - n_successes)
    return random.beta(key, posterior_a, posterior_b)


def count_edges(gamma: Int[Array, "G G"]) -> Float[Array, ""]:
    """Number of edges in the off-diagonal part of `gamma`.

    The diagonal is structurally zero (no self-loops) and is ignored.
    """
    G = gamma.shape[0]
    return jnp.sum(gamma * (1 - jnp.eye(G, dtype=gamma.dtype)))


@jax.jit
def sample_rho_kernel(
    key: jax.Array,
    gamma: Int[Array, "G G"],
    prior_a: float,
    prior_b: float,
) -> Float[Array, ""]:
    """JIT-compiled edge probability update, without any input checks.

    See `sample_rho` for the description.
    """
    G = gamma.shape[0]
    return sample_beta_posterior(
        key,
        n_successes=count_edges(gamma),
        n_trials=G * (G - 1),
        prior_a=prior_a,
        prior_b=prior_b,
    )


@jax.jit
def sample_psi_kernel(
    key: jax.Array,
    phi: Int[Array, "G K"],
    d: int,
    prior_a: float,
    prior_b: float,
) -> Float[Array, ""]:
    """JIT-compiled link probability update, without any input checks.

    See `sample_psi` for the description.
    """
    return sample_beta_posterior(
        key,
        n_successes=jnp.sum(phi),
        n_trials=d,
        prior_a=prior_a,
        prior_b=prior_b,
    )


def sample_rho(
    key: jax.Array,
    gamma: Int[Array, "G G"],
    p: int,
    a_rho: float,
    b_rho: float,
) -> Float[Array, ""]:
    """Samples the edge inclusion probability

    .. math::

       \\rho \\sim Beta(a_\\rho + k, b_\\rho + p(p-1) - k)

    where :math:`k` is the number of edges in the gene-gene
    indicator matrix.

    Args:
        key: JAX random key. Exactly one key is consumed
        gamma: indicator matrix of shape (p, p). Not modified
        p: number of nodes
        a_rho: first shape parameter of the Beta prior
        b_rho: second shape parameter of the Beta prior

    Returns:
        sample from the interval [0, 1]

    Raises:
        InvalidHyperparameterError: if `a_rho` or `b_rho` is not positive
        DimensionMismatchError: if `gamma` is not of shape (p, p)
          or it has entries outside [0, 1]
    """
    val.check_positive(a_rho=a_rho, b_rho=b_rho)
    p = val.check_count("p", p)
    gamma_np = val.as_matrix("Gamma", gamma, shape=(p, p))
    # Entries in [0, 1] give at most p(p-1) off-diagonal edges
    val.check_unit_interval("Gamma", gamma_np)

    return sample_rho_kernel(
        key, jnp.asarray(gamma_np), prior_a=float(a_rho), prior_b=float(b_rho)
    )


def sample_psi(
    key: jax.Array,
    phi: Int[Array, "G K"],
    d: int,
    a_psi: float,
    b_psi: float,
) -> Float[Array, ""]:
    """Samples the gene-covariate link inclusion probability

    .. math::

       \\psi \\sim Beta(a_\\psi + k, b_\\psi + d - k)

    where :math:`k` is the number of links present in `phi`
    and :math:`d` is the number of admissible links
    (non-zero entries of the indicator matrix `D`).

    Args:
        key: JAX random key. Exactly one key is consumed
        phi: link indicator matrix of shape (p, k). Not modified
        d: number of admissible links
        a_psi: first shape parameter of the Beta prior
        b_psi: second shape parameter of the Beta prior

    Returns:
        sample from the interval [0, 1]

    Raises:
        InvalidHyperparameterError: if `a_psi` or `b_psi` is not positive
        DimensionMismatchError: if `d` is larger than the number of entries
          of `phi` or `phi` has more than `d` links
          or entries outside [0, 1]
    """
    val.check_positive(a_psi=a_psi, b_psi=b_psi)
    d = val.check_count("d", d)
    phi_np = val.as_matrix("Phi", phi)
    val.check_unit_interval("Phi", phi_np)

    if d > phi_np.size:
        raise DimensionMismatchError(
            f"There are d={d} admissible links, "
            f"but Phi has only {phi_np.size} entries."
        )
    n_links = float(phi_np.sum())
    if n_links < 0 or n_links > d:
        raise DimensionMismatchError(
            f"Phi has {n_links} links, which is outside of [0, {d}]."
        )

    return sample_psi_kernel(
        key, jnp.asarray(phi_np), d=d, prior_a=float(a_psi), prior_b=float(b_psi)
    )
