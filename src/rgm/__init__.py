"""Bayesian reciprocal graphical models for integrative
gene regulatory network analysis."""

import rgm.errors as errors
import rgm.reciprocal as reciprocal
import rgm.sampling as sampling
from rgm._shrinkage import sample_eta, sample_tau
from rgm._sparsity import sample_psi, sample_rho

__all__ = [
    "errors",
    "reciprocal",
    "sampling",
    "sample_eta",
    "sample_psi",
    "sample_rho",
    "sample_tau",
]
