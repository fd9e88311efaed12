"""Gibbs sampler for the reciprocal graphical model of

Y. Ni, Y. Ji and P. Müller, "Reciprocal graphical models for integrative
gene regulatory network analysis", Bayesian Analysis (2018)
"""
import logging
from typing import Optional, Sequence

import jax
import jax.numpy as jnp
import jax.random as jrandom
import numpy as np

from jaxtyping import Array, Float, Int

from rgm._shrinkage import sample_inverse_gamma
from rgm._sparsity import sample_psi_kernel, sample_rho_kernel
from rgm._utils import JAXRNG
from rgm.errors import DimensionMismatchError
from rgm.reciprocal._coefficients import sample_a_gamma, sample_b_phi
from rgm.reciprocal._hyperparameters import Hyperparameters
from rgm.reciprocal._likelihood import log_likelihood, sample_sigma_inv
from rgm.sampling import AbstractGibbsSampler, DatasetInterface
import rgm._validation as val

_LOGGER = logging.getLogger(__name__)

# Heavy-tailed prior draws of the slab variances are capped at initialisation,
# so that the initial coefficients are finite.
_MAX_INITIAL_VARIANCE = 1e6


@jax.jit
def single_sampling_step(
    key: jax.Array,
    sample: dict,
    *,
    X: Float[Array, "N K"],
    Y: Float[Array, "N G"],
    mask: Int[Array, "G K"],
    n_links: int,
    hyperparameters: Hyperparameters,
) -> dict:
    """One sweep of the Gibbs sampler.

    The variables are updated in the order:
    `rho`, `psi`, (`Gamma`, `Tau`, `A`), (`Phi`, `Eta`, `B`), `sigma_inv`.
    Each update uses the most recent values of the other variables.

    Args:
        key: JAX random key
        sample: current state, see `ReciprocalGraphicalModelSampler.dimensions`
        X: covariates
        Y: node values
        mask: indicator matrix `D` of admissible gene-covariate links
        n_links: number of non-zero entries of `mask`
        hyperparameters: prior hyperparameters

    Returns:
        new state
    """
    h = hyperparameters
    keys = jrandom.split(key, 5)

    rho = sample_rho_kernel(keys[0], sample["Gamma"], h.a_rho, h.b_rho)
    psi = sample_psi_kernel(keys[1], sample["Phi"], n_links, h.a_psi, h.b_psi)

    gene_gene = sample_a_gamma(
        keys[2],
        A=sample["A"],
        B=sample["B"],
        X=X,
        Y=Y,
        sigma_inv=sample["sigma_inv"],
        rho=rho,
        nu_1=h.nu_1,
        a_tau=h.a_tau,
        b_tau=h.b_tau,
        prop_var=h.prop_var_a,
    )
    gene_covariate = sample_b_phi(
        keys[3],
        A=gene_gene.A,
        B=sample["B"],
        X=X,
        Y=Y,
        mask=mask,
        sigma_inv=sample["sigma_inv"],
        psi=psi,
        nu_2=h.nu_2,
        a_eta=h.a_eta,
        b_eta=h.b_eta,
    )

    sigma_inv = sample_sigma_inv(
        keys[4],
        A=gene_gene.A,
        B=gene_covariate.B,
        X=X,
        Y=Y,
        a_sigma=h.a_sigma,
        b_sigma=h.b_sigma,
    )

    return {
        "A": gene_gene.A,
        "B": gene_covariate.B,
        "Gamma": gene_gene.gamma,
        "Phi": gene_covariate.phi,
        "Tau": gene_gene.tau,
        "Eta": gene_covariate.eta,
        "rho": rho,
        "psi": psi,
        "sigma_inv": sigma_inv,
        "log_likelihood": log_likelihood(
            A=gene_gene.A, B=gene_covariate.B, X=X, Y=Y, sigma_inv=sigma_inv
        ),
        "acceptance_A": gene_gene.acceptance_rate,
    }


def _check_indicator_matrix(D, n_nodes: int, n_covariates: int) -> np.ndarray:
    if D is None:
        return np.ones((n_nodes, n_covariates), dtype=int)

    D = np.asarray(D)
    if D.ndim != 2 or D.shape[0] != n_nodes:
        raise DimensionMismatchError(
            "Number of rows of the indicator matrix should be equal "
            f"to the number of nodes ({n_nodes}), but D has shape {D.shape}."
        )
    if D.shape[1] != n_covariates:
        raise DimensionMismatchError(
            "Number of columns of the indicator matrix should be equal "
            f"to the number of covariates ({n_covariates}), "
            f"but D has shape {D.shape}."
        )
    if not np.all((D == 0) | (D == 1)):
        raise ValueError("All the entries of the indicator matrix should be 0 or 1.")
    return D.astype(int)


class ReciprocalGraphicalModelSampler(AbstractGibbsSampler):
    """A Gibbs sampler learning the gene-gene interactions `A`
    and gene-covariate interactions `B` from the data.

    The model is :math:`(I - A) y_n = B x_n + e_n` with spike-and-slab
    priors on the entries of `A` and `B`.
    """

    def __init__(
        self,
        datasets: Sequence[DatasetInterface],
        X: Float[Array, "points covariates"],
        Y: Float[Array, "points nodes"],
        D: Optional[Int[Array, "nodes covariates"]] = None,
        *,
        hyperparameters: Optional[Hyperparameters] = None,
        A0: Optional[Float[Array, "nodes nodes"]] = None,
        B0: Optional[Float[Array, "nodes covariates"]] = None,
        warmup: int = 3_000,
        steps: int = 7_000,
        verbose: bool = False,
        seed: int = 500,
        deterministic_init: bool = False,
    ) -> None:
        """
        Args:
            datasets: data sets in which the samples are stored
            X: covariates (e.g., DNA measurements), shape (n_points, n_covariates)
            Y: node values (e.g., gene expressions), shape (n_points, n_nodes)
            D: binary matrix of shape (n_nodes, n_covariates).
                The entry is 1 if the covariate can affect the node.
                By default (None) all the links are admissible
            hyperparameters: prior hyperparameters.
                By default (None) `Hyperparameters()` is used
            A0: initial gene-gene interaction matrix, with zero diagonal.
                By default (None) sampled from the prior
            B0: initial gene-covariate interaction matrix.
                It is multiplied entrywise with `D`.
                By default (None) sampled from the prior
            warmup: number of warmup steps in Gibbs sampling
            steps: number of Gibbs steps after the warmup
            verbose: whether the sampler should print out the sampling status
            seed: random seed
            deterministic_init: whether to start with `A` and `B`
                equal to zero (unless `A0` or `B0` are provided),
                rather than sampling them from the prior

        Raises:
            DimensionMismatchError: if the shapes of the inputs are inconsistent
            InvalidHyperparameterError: if a hyperparameter is not positive
            ValueError: if `D` is not binary or the diagonal of `A0` is non-zero
        """
        super().__init__(datasets, warmup=warmup, steps=steps, verbose=verbose)

        self._jax_rng = JAXRNG(jax.random.PRNGKey(seed))
        self._deterministic_init = deterministic_init

        X = val.as_matrix("X", X)
        Y = val.as_matrix("Y", Y)
        if X.shape[0] != Y.shape[0]:
            raise DimensionMismatchError(
                "Number of data points for both node values and covariate values "
                f"should be the same, but X has {X.shape[0]} "
                f"and Y has {Y.shape[0]} rows."
            )
        self._X = jnp.asarray(X)
        self._Y = jnp.asarray(Y)
        self._n_points, self._n_nodes = Y.shape
        self._n_covariates = X.shape[1]

        D = _check_indicator_matrix(D, self._n_nodes, self._n_covariates)
        self._mask = jnp.asarray(D)
        self._n_links = int(D.sum())

        self._hyperparameters = (hyperparameters or Hyperparameters()).validate()

        G, K = self._n_nodes, self._n_covariates
        if A0 is not None:
            A0 = val.as_matrix("A0", A0, shape=(G, G))
            if np.any(np.diag(A0) != 0):
                raise ValueError("A0 should have all diagonal entries equal to 0.")
            A0 = jnp.asarray(A0)
        if B0 is not None:
            B0 = jnp.asarray(val.as_matrix("B0", B0, shape=(G, K)) * D)
        self._A0 = A0
        self._B0 = B0

        _LOGGER.debug(
            f"Sampler with {self._n_points} points, {G} nodes, {K} covariates "
            f"and {self._n_links} admissible links."
        )

    @classmethod
    def dimensions(cls) -> dict:
        """The sites in each sample with annotated dimensions."""
        return {
            "A": ["node_dim0", "node_dim1"],
            "B": ["node", "covariate"],
            "Gamma": ["node_dim0", "node_dim1"],
            "Phi": ["node", "covariate"],
            "Tau": ["node_dim0", "node_dim1"],
            "Eta": ["node", "covariate"],
            "rho": [],
            "psi": [],
            "sigma_inv": ["node"],
            "log_likelihood": [],
            "acceptance_A": [],
        }

    @property
    def hyperparameters(self) -> Hyperparameters:
        return self._hyperparameters

    def new_sample(self, sample: dict) -> dict:
        """A new sample."""
        return single_sampling_step(
            self._jax_rng.key,
            sample,
            X=self._X,
            Y=self._Y,
            mask=self._mask,
            n_links=self._n_links,
            hyperparameters=self._hyperparameters,
        )

    def diagnostics(self, sample: dict) -> dict:
        return {
            "log_likelihood": float(sample["log_likelihood"]),
            "acceptance_A": float(sample["acceptance_A"]),
            "n_edges": int(sample["Gamma"].sum()),
            "n_links": int(sample["Phi"].sum()),
        }

    def initialise(self) -> dict:
        """Initialises the sample by drawing from the prior.

        `A0` and `B0` are used instead of the prior draws, if provided.
        """
        h = self._hyperparameters
        G, K = self._n_nodes, self._n_covariates
        off_diagonal = 1 - jnp.eye(G, dtype=int)
        mask = self._mask

        sigma_inv = (
            jrandom.gamma(self._jax_rng.key, h.a_sigma, shape=(G,)) / h.b_sigma
        )
        rho = jrandom.beta(self._jax_rng.key, h.a_rho, h.b_rho)
        psi = jrandom.beta(self._jax_rng.key, h.a_psi, h.b_psi)

        gamma = (
            jnp.asarray(jrandom.bernoulli(self._jax_rng.key, rho, shape=(G, G)), int)
            * off_diagonal
        )
        phi = (
            jnp.asarray(jrandom.bernoulli(self._jax_rng.key, psi, shape=(G, K)), int)
            * mask
        )

        tau = sample_inverse_gamma(
            self._jax_rng.key, shape=h.a_tau, scale=jnp.full((G, G), h.b_tau)
        )
        tau = jnp.minimum(tau, _MAX_INITIAL_VARIANCE) * off_diagonal
        eta = sample_inverse_gamma(
            self._jax_rng.key, shape=h.a_eta, scale=jnp.full((G, K), h.b_eta)
        )
        eta = jnp.minimum(eta, _MAX_INITIAL_VARIANCE) * mask

        if self._A0 is not None:
            A = self._A0
        elif self._deterministic_init:
            A = jnp.zeros((G, G))
        else:
            variance_a = tau * (gamma + (1 - gamma) * h.nu_1)
            A = jnp.sqrt(variance_a) * jrandom.normal(self._jax_rng.key, shape=(G, G))

        if self._B0 is not None:
            B = self._B0
        elif self._deterministic_init:
            B = jnp.zeros((G, K))
        else:
            variance_b = eta * (phi + (1 - phi) * h.nu_2)
            B = jnp.sqrt(variance_b) * jrandom.normal(self._jax_rng.key, shape=(G, K))

        return {
            "A": A,
            "B": B,
            "Gamma": gamma,
            "Phi": phi,
            "Tau": tau,
            "Eta": eta,
            "rho": rho,
            "psi": psi,
            "sigma_inv": sigma_inv,
            "log_likelihood": log_likelihood(
                A=A, B=B, X=self._X, Y=self._Y, sigma_inv=sigma_inv
            ),
            "acceptance_A": jnp.zeros(()),
        }


def summarize_samples(samples: Sequence[dict], threshold: float = 0.5) -> dict:
    """Summarises the posterior samples.

    Args:
        samples: samples collected by `ReciprocalGraphicalModelSampler`,
          e.g., `ListDataset.samples`
        threshold: posterior inclusion probability above which
          (inclusive) the coefficient is kept

    Returns:
        dictionary with keys:
          "A": posterior mean of `A`, zeroed where the posterior
            edge probability is below `threshold`
          "B": posterior mean of `B`, zeroed where the posterior
            link probability is below `threshold`
          "Gamma": posterior edge probabilities
          "Phi": posterior link probabilities
          "log_likelihood": log-likelihood trace

    Raises:
        ValueError, if `samples` is empty or `threshold` is outside [0, 1]
    """
    if len(samples) == 0:
        raise ValueError("At least one sample is needed.")
    if not 0 <= threshold <= 1:
        raise ValueError(f"Threshold has to be from [0, 1], but is {threshold}.")

    def stack(label: str) -> np.ndarray:
        return np.asarray([s[label] for s in samples])

    gamma = stack("Gamma").mean(axis=0)
    phi = stack("Phi").mean(axis=0)
    A = stack("A").mean(axis=0) * (gamma >= threshold)
    B = stack("B").mean(axis=0) * (phi >= threshold)

    return {
        "A": A,
        "B": B,
        "Gamma": gamma,
        "Phi": phi,
        "log_likelihood": stack("log_likelihood"),
    }
