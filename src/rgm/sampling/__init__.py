"""Generic utilities for Gibbs sampling."""

from rgm.sampling._datasets import DatasetInterface, ListDataset
from rgm.sampling._sampler import AbstractGibbsSampler

__all__ = [
    "DatasetInterface",
    "ListDataset",
    "AbstractGibbsSampler",
]
