from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np

U64_MAX = 2**64 - 1


def validate_sample(sample) -> int:
    """Check that ``sample`` is an unsigned 64-bit integer value.

    Args:
        sample: Python ``int`` or numpy integer scalar.

    Returns:
        The sample as a plain Python ``int``.

    Raises:
        TypeError: If ``sample`` is not integral (``bool`` is rejected too).
        ValueError: If ``sample`` is outside ``[0, 2**64 - 1]``.
    """
    if isinstance(sample, bool) or not isinstance(sample, (int, np.integer)):
        raise TypeError(f"sample must be an integer, got {type(sample).__name__}")
    value = int(sample)
    if value < 0 or value > U64_MAX:
        raise ValueError(f"sample out of u64 range: {value}")
    return value


class Bucketing(ABC):
    """A bucketing algorithm for histograms.

    Decides which bucket a sample goes into. Strategies either compute
    buckets on the fly or pre-compute a table of bucket minimums.
    """

    __slots__ = ()

    @abstractmethod
    def sample_to_bucket_minimum(self, sample: int) -> int:
        """Return the minimum value of the bucket ``sample`` falls into."""

    @abstractmethod
    def ranges(self) -> list[int]:
        """Return the pre-computed bucket minimums in ascending order."""

    def samples_to_bucket_minimums(self, samples: Iterable[int]) -> np.ndarray:
        """Classify many samples at once.

        Args:
            samples: Iterable or array of integer samples.

        Returns:
            ``uint64`` array of bucket minimums, same order as ``samples``.

        How it works:
            Delegates element-wise to ``sample_to_bucket_minimum`` so batch
            and scalar classification can never disagree at bucket edges.
        """
        if isinstance(samples, np.ndarray):
            samples = samples.ravel().tolist()
        return np.fromiter(
            (self.sample_to_bucket_minimum(s) for s in samples),
            dtype=np.uint64,
        )
