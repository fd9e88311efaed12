"""Sampling the coefficients together with their spike/slab indicators
and slab variances.

For each coefficient the pair (indicator, slab variance) is drawn jointly:
first the indicator with the slab variance integrated out, which makes the
coefficient Student-t distributed under both the spike and the slab,
and then the slab variance given the new indicator.

Gene-gene coefficients `A` enter the likelihood through the Jacobian
:math:`\\log|\\det(I-A)|`, so they are updated one at a time
with random-walk Metropolis-Hastings. Gene-covariate coefficients `B`
have Gaussian full conditionals and are sampled exactly.
"""
from typing import NamedTuple

import jax
import jax.numpy as jnp
import jax.random as jrandom

import numpyro.distributions as dist

from jaxtyping import Array, Float, Int

from rgm._shrinkage import sample_eta_matrix, sample_tau_matrix
from rgm._utils import off_diagonal_indices


def _normal_logp(x, variance):
    """Evaluates log-PDF of `N(0, variance)` at `x`."""
    return dist.Normal(0.0, scale=jnp.sqrt(variance)).log_prob(x)


def _marginal_logp(x, scaling, prior_shape, prior_rate):
    """Log-PDF of `N(0, scaling * v)` at `x`, with
    `v ~ InvGamma(prior_shape, prior_rate)` integrated out."""
    scale = jnp.sqrt(prior_rate * scaling / prior_shape)
    return dist.StudentT(2 * prior_shape, 0.0, scale).log_prob(x)


def _sample_slab_indicators(
    key: jax.Array,
    coefficients: Float[Array, " *shape"],
    prob: float,
    nu: float,
    prior_shape: float,
    prior_rate: float,
) -> Int[Array, " *shape"]:
    """Samples the indicators of the slab component,
    marginalising over the slab variances.

    Args:
        key: JAX random key
        coefficients: current coefficients
        prob: prior probability of the slab component
        nu: spike-to-slab variance ratio
        prior_shape: shape of the inverse gamma prior on the slab variance
        prior_rate: scale of the inverse gamma prior on the slab variance
    """
    logp_slab = _marginal_logp(coefficients, 1.0, prior_shape, prior_rate)
    logp_spike = _marginal_logp(coefficients, nu, prior_shape, prior_rate)

    log_odds = logp_slab - logp_spike + jnp.log(prob) - jnp.log1p(-prob)
    return jnp.asarray(jrandom.bernoulli(key, p=jax.nn.sigmoid(log_odds)), dtype=int)


@jax.jit
def sample_gamma_indicators(
    key: jax.Array,
    A: Float[Array, "G G"],
    rho: float,
    nu_1: float,
    a_tau: float,
    b_tau: float,
) -> Int[Array, "G G"]:
    """Samples the gene-gene edge indicators, with the slab
    variances `tau` integrated out.

    Returns:
        binary matrix of shape (G, G) with zero diagonal
    """
    G = A.shape[0]
    off_diagonal = 1 - jnp.eye(G, dtype=int)
    indicators = _sample_slab_indicators(
        key, coefficients=A, prob=rho, nu=nu_1, prior_shape=a_tau, prior_rate=b_tau
    )
    return indicators * off_diagonal


@jax.jit
def sample_phi_indicators(
    key: jax.Array,
    B: Float[Array, "G K"],
    mask: Int[Array, "G K"],
    psi: float,
    nu_2: float,
    a_eta: float,
    b_eta: float,
) -> Int[Array, "G K"]:
    """Samples the gene-covariate link indicators, with the slab
    variances `eta` integrated out.

    Returns:
        binary matrix of shape (G, K), zero wherever `mask` is zero
    """
    indicators = _sample_slab_indicators(
        key, coefficients=B, prob=psi, nu=nu_2, prior_shape=a_eta, prior_rate=b_eta
    )
    return jnp.where(mask != 0, indicators, 0)


def _prior_variance(indicator, slab_variance, nu):
    return slab_variance * (indicator + (1 - indicator) * nu)


class GeneGeneSample(NamedTuple):
    """Result of the gene-gene update."""

    A: Float[Array, "G G"]
    gamma: Int[Array, "G G"]
    tau: Float[Array, "G G"]
    acceptance_rate: Float[Array, ""]


def _a_conditional_logdensity(
    A: Float[Array, "G G"],
    j: int,
    l: int,
    multmat_y_row: Float[Array, " N"],
    b_x_row: Float[Array, " N"],
    sigma_inv: Float[Array, " G"],
    n_points: int,
    prior_variance: float,
) -> Float[Array, ""]:
    """Log-density of `A[j, l]` given all the other variables,
    up to an additive constant.

    Args:
        multmat_y_row: `j`th row of :math:`(I-A)Y^T`
        b_x_row: `j`th row of :math:`BX^T`
    """
    G = A.shape[0]
    _, logabsdet = jnp.linalg.slogdet(jnp.eye(G) - A)
    resid = multmat_y_row - b_x_row
    return (
        n_points * logabsdet
        - 0.5 * sigma_inv[j] * jnp.sum(jnp.square(resid))
        + _normal_logp(A[j, l], prior_variance)
    )


@jax.jit
def sample_a_gamma(
    key: jax.Array,
    *,
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
    sigma_inv: Float[Array, " G"],
    rho: float,
    nu_1: float,
    a_tau: float,
    b_tau: float,
    prop_var: float,
) -> GeneGeneSample:
    """Updates the edge indicators and the slab variances, and then sweeps
    over the off-diagonal entries of `A` in row-major order,
    doing one Metropolis-Hastings step per entry.

    Args:
        key: JAX random key
        A: current gene-gene coefficients, zero diagonal
        B: current gene-covariate coefficients
        X: covariates, shape (N, K)
        Y: node values, shape (N, G)
        sigma_inv: noise precisions
        rho: edge inclusion probability
        nu_1: spike-to-slab variance ratio
        a_tau: shape of the inverse gamma prior on the slab variances
        b_tau: scale of the inverse gamma prior on the slab variances
        prop_var: variance of the Gaussian random-walk proposal

    Returns:
        new `A`, edge indicators, slab variances
        and the fraction of accepted proposals
    """
    G = A.shape[0]
    N = Y.shape[0]
    key_gamma, key_tau, key_sweep = jrandom.split(key, 3)

    gamma = sample_gamma_indicators(
        key_gamma, A=A, rho=rho, nu_1=nu_1, a_tau=a_tau, b_tau=b_tau
    )
    tau = sample_tau_matrix(
        key_tau, a=A, gamma=gamma, a_tau=a_tau, b_tau=b_tau, nu_1=nu_1
    )

    rows, cols = map(jnp.asarray, off_diagonal_indices(G))
    # A single node has no edges
    if rows.shape[0] == 0:
        return GeneGeneSample(
            A=A, gamma=gamma, tau=tau, acceptance_rate=jnp.zeros(())
        )

    # Rows of BX^T do not depend on `A`
    b_x = jnp.einsum("gk,nk->gn", B, X)
    prop_std = jnp.sqrt(prop_var)

    def update_entry(carry: tuple, idx: int) -> tuple:
        A, n_accepted = carry
        j, l = rows[idx], cols[idx]
        key_prop, key_accept = jrandom.split(jrandom.fold_in(key_sweep, idx))

        variance = _prior_variance(gamma[j, l], tau[j, l], nu_1)
        A_new = A.at[j, l].set(A[j, l] + prop_std * jrandom.normal(key_prop))

        def logp(mat):
            row = (jnp.eye(G)[j] - mat[j]) @ Y.T
            return _a_conditional_logdensity(
                mat,
                j=j,
                l=l,
                multmat_y_row=row,
                b_x_row=b_x[j],
                sigma_inv=sigma_inv,
                n_points=N,
                prior_variance=variance,
            )

        log_ratio = logp(A_new) - logp(A)
        accept = jnp.log(jrandom.uniform(key_accept)) < log_ratio

        A = jnp.where(accept, A_new, A)
        return (A, n_accepted + accept), None

    (A, n_accepted), _ = jax.lax.scan(
        update_entry,
        (A, jnp.zeros((), dtype=int)),
        jnp.arange(rows.shape[0]),
    )
    acceptance_rate = n_accepted / rows.shape[0]
    return GeneGeneSample(
        A=A,
        gamma=gamma,
        tau=tau,
        acceptance_rate=jnp.asarray(acceptance_rate, dtype=float),
    )


class GeneCovariateSample(NamedTuple):
    """Result of the gene-covariate update."""

    B: Float[Array, "G K"]
    phi: Int[Array, "G K"]
    eta: Float[Array, "G K"]


@jax.jit
def sample_b_phi(
    key: jax.Array,
    *,
    A: Float[Array, "G G"],
    B: Float[Array, "G K"],
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
    mask: Int[Array, "G K"],
    sigma_inv: Float[Array, " G"],
    psi: float,
    nu_2: float,
    a_eta: float,
    b_eta: float,
) -> GeneCovariateSample:
    """Updates the link indicators and the slab variances, and then sweeps
    over the entries of `B` in row-major order, sampling each admissible
    entry from its Gaussian full conditional.

    For an entry :math:`b = B_{jl}` let :math:`r` be the `j`th row
    of :math:`(I-A)Y^T - BX^T` with the contribution of :math:`b` removed.
    Then :math:`r = b x_l + e` and with the prior :math:`N(0, v)`

    .. math::

       b \\mid \\cdot \\sim N(\\mu, 1/\\lambda), \\quad
       \\lambda = s \\|x_l\\|^2 + 1/v, \\quad \\mu = s \\langle x_l, r\\rangle / \\lambda

    where :math:`s` is the noise precision of node `j`.
    Entries with zero `mask` are kept at 0.
    """
    G, K = B.shape
    key_phi, key_eta, key_sweep = jrandom.split(key, 3)

    phi = sample_phi_indicators(
        key_phi, B=B, mask=mask, psi=psi, nu_2=nu_2, a_eta=a_eta, b_eta=b_eta
    )
    eta = sample_eta_matrix(
        key_eta, b=B, phi=phi, mask=mask, a_eta=a_eta, b_eta=b_eta, nu_2=nu_2
    )

    # (I-A)Y^T does not depend on `B`
    multmat_y = jnp.einsum("gh,nh->gn", jnp.eye(G) - A, Y)
    x_sq_norms = jnp.sum(jnp.square(X), axis=0)

    def update_entry(B: Float[Array, "G K"], idx: int) -> tuple:
        j, l = idx // K, idx % K
        admissible = mask[j, l] != 0

        slab_variance = jnp.where(admissible, eta[j, l], 1.0)
        variance = _prior_variance(phi[j, l], slab_variance, nu_2)
        partial = multmat_y[j] - B[j] @ X.T + B[j, l] * X[:, l]

        precision = sigma_inv[j] * x_sq_norms[l] + jnp.reciprocal(variance)
        mean = sigma_inv[j] * jnp.dot(X[:, l], partial) / precision
        b = mean + jrandom.normal(jrandom.fold_in(key_sweep, idx)) / jnp.sqrt(
            precision
        )

        B = B.at[j, l].set(jnp.where(admissible, b, 0.0))
        return B, None

    B, _ = jax.lax.scan(update_entry, B, jnp.arange(G * K))
    return GeneCovariateSample(B=B, phi=phi, eta=eta)
