from __future__ import annotations

import math
from typing import Any, Mapping

from .base import U64_MAX, Bucketing, validate_sample


def _check_exponent(exponent: float) -> float:
    exponent = float(exponent)
    if not math.isfinite(exponent) or exponent <= 1.0:
        raise ValueError(f"exponent must be finite and > 1, got {exponent}")
    return exponent


class Functional(Bucketing):
    """Functional bucketing: boundaries come from a formula, not a table.

    The bucket index of a sample ``x`` is ``floor(n * log_base(x + 1))``,
    i.e. there are ``n`` buckets for each power of ``base``. Internally this
    reduces to a single constant ``exponent = base ** (1 / n)`` and bucket
    ``i`` starts at ``floor(exponent ** i)``.
    """

    __slots__ = ("_exponent",)

    def __init__(self, log_base: float, buckets_per_magnitude: float) -> None:
        """Derive the per-bucket growth factor.

        Args:
            log_base: Base of one magnitude, must be ``> 1``.
            buckets_per_magnitude: Buckets per power of ``log_base``, ``> 0``.

        Raises:
            ValueError: If either parameter is outside its domain.
        """
        log_base = float(log_base)
        buckets_per_magnitude = float(buckets_per_magnitude)
        if not math.isfinite(log_base) or log_base <= 1.0:
            raise ValueError(f"log_base must be finite and > 1, got {log_base}")
        if not math.isfinite(buckets_per_magnitude) or buckets_per_magnitude <= 0.0:
            raise ValueError(
                f"buckets_per_magnitude must be finite and > 0, got {buckets_per_magnitude}"
            )
        exponent = math.pow(log_base, 1.0 / buckets_per_magnitude)
        object.__setattr__(self, "_exponent", _check_exponent(exponent))

    @classmethod
    def from_exponent(cls, exponent: float) -> "Functional":
        """Rebuild a strategy from its stored growth factor."""
        obj = cls.__new__(cls)
        object.__setattr__(obj, "_exponent", _check_exponent(exponent))
        return obj

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Functional":
        if "exponent" not in data:
            raise ValueError("functional bucketing document is missing 'exponent'")
        return cls.from_exponent(data["exponent"])

    def to_dict(self) -> dict[str, float]:
        return {"exponent": self._exponent}

    @property
    def exponent(self) -> float:
        return self._exponent

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return (Functional.from_exponent, (self._exponent,))

    def __copy__(self) -> "Functional":
        return self

    def __deepcopy__(self, memo: dict) -> "Functional":
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Functional):
            return NotImplemented
        return self._exponent == other._exponent

    def __hash__(self) -> int:
        return hash((Functional, self._exponent))

    def __repr__(self) -> str:
        return f"Functional(exponent={self._exponent!r})"

    def _sample_to_bucket_index(self, sample: int) -> int:
        """Map a sample to its consecutive bucket index.

        The index is only a computation aid; buckets are identified and
        reported by their minimum value.
        """
        return int(math.log(float(sample + 1)) / math.log(self._exponent))

    def _bucket_index_to_bucket_minimum(self, index: int) -> int:
        return min(int(math.pow(self._exponent, float(index))), U64_MAX)

    def sample_to_bucket_minimum(self, sample: int) -> int:
        sample = validate_sample(sample)
        if sample == 0:
            return 0

        index = self._sample_to_bucket_index(sample)
        minimum = self._bucket_index_to_bucket_minimum(index)
        # The +1 offset can place a sample just below a boundary into the
        # bucket above it. floor(exponent ** 0) == 1 bounds the walk.
        while minimum > sample and index > 0:
            index -= 1
            minimum = self._bucket_index_to_bucket_minimum(index)
        return minimum

    def ranges(self) -> list[int]:
        raise NotImplementedError("Bucket ranges for functional bucketing are not precomputed")
