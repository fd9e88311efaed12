"""Reciprocal graphical model: full conditionals, likelihood,
simulation and the Gibbs sampler."""

from rgm.reciprocal._coefficients import (
    sample_a_gamma,
    sample_b_phi,
    sample_gamma_indicators,
    sample_phi_indicators,
)
from rgm.reciprocal._gibbs import (
    ReciprocalGraphicalModelSampler,
    single_sampling_step,
    summarize_samples,
)
from rgm.reciprocal._hyperparameters import Hyperparameters
from rgm.reciprocal._likelihood import log_likelihood, residuals, sample_sigma_inv
from rgm.reciprocal._simulate import simulate_data

__all__ = [
    "sample_a_gamma",
    "sample_b_phi",
    "sample_gamma_indicators",
    "sample_phi_indicators",
    "ReciprocalGraphicalModelSampler",
    "single_sampling_step",
    "summarize_samples",
    "Hyperparameters",
    "log_likelihood",
    "residuals",
    "sample_sigma_inv",
    "simulate_data",
]
