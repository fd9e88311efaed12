"""Storage of the samples collected by a Gibbs sampler."""
from typing import Optional, Protocol


class DatasetInterface(Protocol):
    """Receives the samples stored by `AbstractGibbsSampler.run`.

    Samples from the warmup period are never passed. After the last
    sample `end` is called once, e.g., to mark the data set as complete.
    """

    def append_sample(self, sample: dict) -> None:
        """Receives a sample dictionary, keyed as in
        `AbstractGibbsSampler.dimensions`. The dictionary must not be modified.
        """
        ...

    def end(self) -> None:
        """Called once, after the last sample."""
        ...


class ListDataset(DatasetInterface):
    """Appends samples to a list, in memory."""

    def __init__(self, thinning: Optional[int] = None) -> None:
        """
        Args:
            thinning: only every `thinning`th sample is kept.
              Set to `None` or 1 for no thinning

        Raises:
            ValueError, if `thinning` is not positive
        """
        self.thinning = thinning or 1
        if self.thinning < 1:
            raise ValueError(f"Thinning should be at least 1, but is {thinning}.")
        self.samples: list[dict] = []
        self.iteration: int = 0
        self.finished: bool = False

    def append_sample(self, sample: dict) -> None:
        """Appends a new sample to the list."""
        self.iteration += 1

        if self.iteration % self.thinning == 0:
            self.samples.append(sample)

    def end(self) -> None:
        """Marks the data set as complete."""
        self.finished = True

    def __len__(self) -> int:
        return len(self.samples)
