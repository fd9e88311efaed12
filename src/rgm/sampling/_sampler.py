"""Generic Gibbs sampler."""
import abc
import logging
import time
from typing import Optional, Sequence

import tqdm

from rgm.sampling._datasets import DatasetInterface

_LOGGER = logging.getLogger(__name__)


class AbstractGibbsSampler(abc.ABC):
    """Abstract Gibbs sampler.

    All children classes should implement:
      dimensions: describes the sample and the shapes
      initialise: the first point of the chain
      new_sample: Markov chain transition to a new point

    and can override `diagnostics`, which summarises
    a sample for logging.
    """

    def __init__(
        self,
        datasets: Sequence[DatasetInterface],
        *,
        warmup: int = 2_000,
        steps: int = 3_000,
        verbose: bool = False,
    ) -> None:
        """
        Args:
            datasets: data sets storing the samples
            warmup: number of steps discarded at the beginning of the chain
            steps: number of steps stored in `datasets`
            verbose: whether to show progress bars
        """
        if warmup < 0 or steps < 0:
            raise ValueError(
                f"Number of steps cannot be negative, got warmup={warmup} "
                f"and steps={steps}."
            )
        self.datasets = list(datasets)
        self.warmup = warmup
        self.steps = steps
        self.verbose = verbose

    @classmethod
    @abc.abstractmethod
    def dimensions(cls) -> dict:
        """Returns dictionary describing
        the dimensions, e.g.,:
        {
            "A": ["node_dim0", "node_dim1"],
            "rho": [],
        }
        """
        raise NotImplementedError

    @abc.abstractmethod
    def new_sample(self, sample: dict) -> dict:
        """Transition to a new sample."""
        raise NotImplementedError

    @abc.abstractmethod
    def initialise(self) -> dict:
        """Initializes the sample."""
        raise NotImplementedError

    def diagnostics(self, sample: dict) -> dict:
        """Scalar summaries of `sample` logged during the run."""
        return {}

    def _append(self, sample: dict) -> None:
        for dataset in self.datasets:
            dataset.append_sample(sample)

    def _end_run(self) -> None:
        for dataset in self.datasets:
            dataset.end()

    def _init_sample(self, start: Optional[dict]) -> dict:
        """Initialise first sample using `initialise` method
        and overwriting the fields with `start`.

        Raises:
            KeyError, if there are fields in `start` which are not
              in the sample from `initialise`
        """
        sample = self.initialise()
        start = start or {}
        if not set(start.keys()).issubset(sample.keys()):
            raise KeyError(
                f"Init keys: {sample.keys()}. Tried to update with: {start.keys()}."
            )
        sample.update(start)

        return sample

    def _advance(self, sample: dict, n_steps: int, store: bool, desc: str) -> dict:
        """Runs `n_steps` transitions, optionally storing every sample."""
        t0 = time.time()
        for _ in tqdm.tqdm(
            range(n_steps), total=n_steps, desc=desc, disable=not self.verbose
        ):
            sample = self.new_sample(sample)
            if store:
                self._append(sample)

        dt = max(time.time() - t0, 1e-9)
        _LOGGER.info(
            f"{desc.capitalize()} finished in {dt:.1f} seconds "
            f"({n_steps / dt:.1f} steps/s)."
        )
        for name, value in self.diagnostics(sample).items():
            _LOGGER.debug(f"After {desc}: {name} = {value}")
        return sample

    def run(self, start: Optional[dict] = None) -> dict:
        """Full Gibbs sampling run.

        Args:
            start: optional values overwriting the initial sample

        Returns:
            the last sample of the chain
        """
        _LOGGER.info("Initialising the first sample...")
        sample = self._init_sample(start)

        t0 = time.time()
        _LOGGER.info(f"Starting warmup period with {self.warmup} steps...")
        sample = self._advance(sample, self.warmup, store=False, desc="warmup")

        _LOGGER.info(f"Starting sampling with {self.steps} steps...")
        sample = self._advance(sample, self.steps, store=True, desc="sampling")

        self._end_run()
        _LOGGER.info(f"Run finished in {time.time() - t0:.1f} seconds.")
        return sample
