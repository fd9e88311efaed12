"""Prior hyperparameters of the reciprocal graphical model."""
from typing import NamedTuple

import rgm._validation as val


class Hyperparameters(NamedTuple):
    """Hyperparameters of the priors and of the Metropolis-Hastings proposal.

    Attrs:
        a_tau, b_tau: inverse gamma prior on the gene-gene slab variances
        a_rho, b_rho: Beta prior on the edge inclusion probability
        nu_1: spike-to-slab variance ratio for the gene-gene coefficients
        a_eta, b_eta: inverse gamma prior on the gene-covariate slab variances
        a_psi, b_psi: Beta prior on the link inclusion probability
        nu_2: spike-to-slab variance ratio for the gene-covariate coefficients
        a_sigma, b_sigma: inverse gamma prior on the noise variances
        prop_var_a: variance of the random-walk proposal for gene-gene coefficients
    """

    a_tau: float = 0.1
    b_tau: float = 0.1
    a_rho: float = 0.5
    b_rho: float = 0.5
    nu_1: float = 1e-4
    a_eta: float = 0.1
    b_eta: float = 0.1
    a_psi: float = 0.5
    b_psi: float = 0.5
    nu_2: float = 1e-4
    a_sigma: float = 0.1
    b_sigma: float = 0.1
    prop_var_a: float = 0.1

    def validate(self) -> "Hyperparameters":
        """Checks that all the hyperparameters are positive and finite.

        Returns:
            the same object, with the values converted to floats

        Raises:
            InvalidHyperparameterError
        """
        val.check_positive(**self._asdict())
        return Hyperparameters(**{k: float(v) for k, v in self._asdict().items()})
