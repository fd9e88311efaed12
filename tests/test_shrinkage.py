import math

import jax.numpy as jnp
import pytest
from jax import random

import rgm._shrinkage as _sh
from rgm.errors import InvalidHyperparameterError, NumericalDegeneracyError


@pytest.mark.parametrize("seed", (21,))
@pytest.mark.parametrize("n_vars", (30_000,))
@pytest.mark.parametrize("prior_shape", (6.0, 9.0))
@pytest.mark.parametrize("prior_rate", (0.5, 2.0))
@pytest.mark.parametrize("indicator", (0.0, 1.0))
def test_slab_variance_moments(
    seed: int, n_vars: int, prior_shape: float, prior_rate: float, indicator: float
) -> None:
    """Compares the empirical moments of the full conditional
    with the analytic formulae for the inverse gamma distribution."""
    nu = 0.1
    coefficient = 0.5
    coefficients = jnp.full((n_vars,), coefficient)
    indicators = jnp.full((n_vars,), indicator)

    variances = _sh.sample_slab_variance(
        random.PRNGKey(seed),
        coefficient=coefficients,
        indicator=indicators,
        prior_shape=prior_shape,
        prior_rate=prior_rate,
        nu=nu,
    )
    assert variances.shape == (n_vars,)

    shape = prior_shape + 0.5
    scaling = indicator + (1 - indicator) * nu
    rate = prior_rate + 0.5 * coefficient**2 / scaling

    analytic_mean = rate / (shape - 1)
    analytic_variance = analytic_mean**2 / (shape - 2)

    assert jnp.mean(variances) == pytest.approx(analytic_mean, rel=0.02)
    assert jnp.var(variances) == pytest.approx(analytic_variance, rel=0.1)


def test_eta_zero_coefficient() -> None:
    eta = _sh.sample_eta(
        random.PRNGKey(0), b=0.0, phi=1.0, a_eta=2.0, b_eta=2.0, nu_2=1.0
    )
    assert math.isfinite(float(eta))
    assert float(eta) > 0


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("coefficient", (0.0, 1e-3, 4.0))
@pytest.mark.parametrize("indicator", (0, 1))
def test_samplers_positive(seed: int, coefficient: float, indicator: int) -> None:
    key = random.PRNGKey(seed)
    eta = _sh.sample_eta(key, coefficient, indicator, 0.1, 0.1, 1e-4)
    tau = _sh.sample_tau(key, coefficient, indicator, 0.1, 0.1, 1e-4)
    for value in (eta, tau):
        assert math.isfinite(float(value))
        assert float(value) > 0


def test_tau_is_reproducible() -> None:
    key = random.PRNGKey(7)
    tau1 = _sh.sample_tau(key, a=0.3, gamma=1, a_tau=1.0, b_tau=1.0, nu_1=0.01)
    tau2 = _sh.sample_tau(key, a=0.3, gamma=1, a_tau=1.0, b_tau=1.0, nu_1=0.01)
    assert float(tau1) == float(tau2)


def test_tau_and_eta_mirror_each_other() -> None:
    key = random.PRNGKey(9)
    tau = _sh.sample_tau(key, a=1.5, gamma=0, a_tau=0.5, b_tau=0.3, nu_1=0.2)
    eta = _sh.sample_eta(key, b=1.5, phi=0, a_eta=0.5, b_eta=0.3, nu_2=0.2)
    assert float(tau) == pytest.approx(float(eta))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"a_tau": 0.0},
        {"b_tau": -1.0},
        {"nu_1": 0.0},
        {"a_tau": math.inf},
        {"b_tau": math.nan},
    ],
)
def test_tau_invalid_hyperparameter(kwargs: dict) -> None:
    params = {"a_tau": 1.0, "b_tau": 1.0, "nu_1": 0.1} | kwargs
    with pytest.raises(InvalidHyperparameterError):
        _sh.sample_tau(random.PRNGKey(0), a=1.0, gamma=1, **params)


@pytest.mark.parametrize("kwargs", [{"a_eta": -2.0}, {"b_eta": 0}, {"nu_2": -1e-4}])
def test_eta_invalid_hyperparameter(kwargs: dict) -> None:
    params = {"a_eta": 1.0, "b_eta": 1.0, "nu_2": 0.1} | kwargs
    with pytest.raises(InvalidHyperparameterError):
        _sh.sample_eta(random.PRNGKey(0), b=1.0, phi=1, **params)


def test_degenerate_rate() -> None:
    """An indicator outside of [0, 1] can make the rate negative."""
    with pytest.raises(NumericalDegeneracyError):
        _sh.sample_tau(random.PRNGKey(0), a=10.0, gamma=2.0, a_tau=1, b_tau=1, nu_1=3)


@pytest.mark.parametrize("coefficient", (math.inf, -math.inf, math.nan))
def test_non_finite_coefficient(coefficient: float) -> None:
    with pytest.raises(NumericalDegeneracyError):
        _sh.sample_eta(
            random.PRNGKey(0), b=coefficient, phi=1, a_eta=1, b_eta=1, nu_2=0.1
        )


def test_tau_matrix_has_zero_diagonal() -> None:
    G = 4
    a = random.normal(random.PRNGKey(1), shape=(G, G)) * (1 - jnp.eye(G))
    gamma = jnp.ones((G, G), dtype=int) - jnp.eye(G, dtype=int)
    tau = _sh.sample_tau_matrix(
        random.PRNGKey(2), a=a, gamma=gamma, a_tau=0.1, b_tau=0.1, nu_1=1e-4
    )
    assert tau.shape == (G, G)
    assert jnp.all(jnp.diag(tau) == 0)
    assert jnp.all(tau + jnp.eye(G) > 0)


def test_eta_matrix_respects_mask() -> None:
    b = jnp.asarray([[1.0, 0.0, 0.5], [0.0, 2.0, 0.0]])
    mask = jnp.asarray([[1, 0, 1], [0, 1, 0]])
    phi = mask
    eta = _sh.sample_eta_matrix(
        random.PRNGKey(3), b=b, phi=phi, mask=mask, a_eta=0.1, b_eta=0.1, nu_2=1e-4
    )
    assert eta.shape == b.shape
    assert jnp.all(jnp.where(mask == 0, eta, 0.0) == 0)
    assert jnp.all(jnp.where(mask == 1, eta, 1.0) > 0)
