from __future__ import annotations

import copy
import math
import pickle

import numpy as np
import pytest

from histobucket.bucketing import U64_MAX, Bucketing, Functional

CONFIGS = [(2.0, 8.0), (2.0, 1.0), (2.0, 16.0), (10.0, 10.0), (1.5, 3.0)]


def test_regression_1623335_index_to_minimum() -> None:
    f = Functional(2.0, 8.0)

    cases = [
        # (bucket index, expected minimum)
        (7, 1),
        (8, 2),
        (9, 2),
        (10, 2),
        (11, 2),
        (12, 2),
        (13, 3),
        (14, 3),
        (15, 3),
        (16, 4),
    ]
    for index, expected in cases:
        assert f._bucket_index_to_bucket_minimum(index) == expected, f"index: {index}"


def test_exponent_is_root_of_log_base() -> None:
    assert Functional(2.0, 8.0).exponent == math.pow(2.0, 1.0 / 8.0)
    assert Functional(10.0, 1.0).exponent == 10.0


@pytest.mark.parametrize("log_base,per_magnitude", CONFIGS)
def test_zero_maps_to_zero(log_base: float, per_magnitude: float) -> None:
    assert Functional(log_base, per_magnitude).sample_to_bucket_minimum(0) == 0


@pytest.mark.parametrize("log_base,per_magnitude", CONFIGS)
def test_minimums_are_monotonic_and_never_exceed_sample(log_base: float, per_magnitude: float) -> None:
    f = Functional(log_base, per_magnitude)
    prev = 0
    for sample in range(0, 20000):
        minimum = f.sample_to_bucket_minimum(sample)
        assert minimum <= sample
        assert minimum >= prev, f"sample {sample}: {minimum} < {prev}"
        prev = minimum


def test_remapping_a_minimum_is_idempotent() -> None:
    f = Functional(2.0, 8.0)
    for sample in range(0, 10000):
        minimum = f.sample_to_bucket_minimum(sample)
        assert f.sample_to_bucket_minimum(minimum) == minimum


def test_two_by_eight_small_samples_are_their_own_minimum() -> None:
    f = Functional(2.0, 8.0)
    assert f.sample_to_bucket_minimum(1) == 1
    assert f.sample_to_bucket_minimum(2) == 2
    assert f.sample_to_bucket_minimum(3) == 3
    assert f.sample_to_bucket_minimum(4) == 4
    assert f.sample_to_bucket_minimum(7) == 7


def test_sample_just_below_boundary_steps_down_one_bucket() -> None:
    f = Functional(10.0, 1.0)

    # sample + 1 lands exactly on the next power of ten.
    assert f._bucket_index_to_bucket_minimum(f._sample_to_bucket_index(9)) == 10
    assert f.sample_to_bucket_minimum(9) == 1
    assert f.sample_to_bucket_minimum(10) == 10
    assert f.sample_to_bucket_minimum(99) == 10
    assert f.sample_to_bucket_minimum(100) == 100

    g = Functional(2.0, 1.0)
    assert [g.sample_to_bucket_minimum(s) for s in [1, 2, 3, 4, 7, 8]] == [1, 2, 2, 4, 4, 8]


def test_functional_survives_copy_and_pickle() -> None:
    f = Functional(2.0, 8.0)

    for clone in (copy.copy(f), copy.deepcopy(f), pickle.loads(pickle.dumps(f))):
        assert clone == f
        assert clone.exponent == f.exponent
        assert clone.sample_to_bucket_minimum(100) == 98

    assert copy.deepcopy({"bucketing": f})["bucketing"] == f
    assert not hasattr(f, "__dict__")


def test_sample_100_round_trips_through_its_bucket_index() -> None:
    f = Functional(2.0, 8.0)
    minimum = f.sample_to_bucket_minimum(100)

    assert minimum == 98
    assert minimum <= 100
    assert f._sample_to_bucket_index(minimum) == f._sample_to_bucket_index(100)


def test_largest_sample_is_classified() -> None:
    f = Functional(2.0, 8.0)
    minimum = f.sample_to_bucket_minimum(U64_MAX)
    assert 0 < minimum <= U64_MAX


def test_ranges_is_unsupported() -> None:
    f = Functional(2.0, 8.0)
    with pytest.raises(NotImplementedError) as exc:
        f.ranges()
    assert "not precomputed" in str(exc.value)


@pytest.mark.parametrize(
    "log_base,per_magnitude",
    [
        (1.0, 8.0),
        (0.5, 8.0),
        (-2.0, 8.0),
        (2.0, 0.0),
        (2.0, -8.0),
        (float("nan"), 8.0),
        (float("inf"), 8.0),
        (2.0, float("nan")),
        (2.0, 1e300),
    ],
)
def test_degenerate_configuration_is_rejected(log_base: float, per_magnitude: float) -> None:
    with pytest.raises(ValueError):
        Functional(log_base, per_magnitude)


@pytest.mark.parametrize("bad", [-1, U64_MAX + 1])
def test_out_of_range_sample_is_rejected(bad: int) -> None:
    with pytest.raises(ValueError):
        Functional(2.0, 8.0).sample_to_bucket_minimum(bad)


@pytest.mark.parametrize("bad", [1.5, "3", True, None])
def test_non_integer_sample_is_rejected(bad) -> None:
    with pytest.raises(TypeError):
        Functional(2.0, 8.0).sample_to_bucket_minimum(bad)


def test_numpy_integer_sample_is_accepted() -> None:
    f = Functional(2.0, 8.0)
    assert f.sample_to_bucket_minimum(np.int64(100)) == f.sample_to_bucket_minimum(100)
    assert f.sample_to_bucket_minimum(np.uint64(3)) == 3


def test_batch_classification_matches_scalar() -> None:
    f = Functional(2.0, 8.0)
    samples = np.arange(0, 5000, dtype=np.int64)

    out = f.samples_to_bucket_minimums(samples)

    assert out.dtype == np.uint64
    assert out.shape == samples.shape
    assert out.tolist() == [f.sample_to_bucket_minimum(int(s)) for s in samples]
    assert f.samples_to_bucket_minimums([]).shape == (0,)


def test_functional_is_immutable_and_hashable() -> None:
    f = Functional(2.0, 8.0)
    with pytest.raises(AttributeError):
        f.exponent = 3.0
    with pytest.raises(AttributeError):
        f._exponent = 3.0

    assert f == Functional(2.0, 8.0)
    assert f != Functional(2.0, 16.0)
    assert len({f, Functional(2.0, 8.0)}) == 1
    assert repr(f).startswith("Functional(exponent=")


class _Table(Bucketing):
    """Minimal precomputed strategy used to exercise the interface."""

    def __init__(self, minimums: list[int]) -> None:
        self._minimums = sorted(minimums)

    def sample_to_bucket_minimum(self, sample: int) -> int:
        best = 0
        for m in self._minimums:
            if m <= sample:
                best = m
        return best

    def ranges(self) -> list[int]:
        return list(self._minimums)


def test_bucketing_interface_is_abstract() -> None:
    with pytest.raises(TypeError):
        Bucketing()


def test_enumerable_strategy_fits_same_contract() -> None:
    table = _Table([0, 1, 5, 10])
    assert table.ranges() == [0, 1, 5, 10]
    assert table.samples_to_bucket_minimums([0, 4, 7, 100]).tolist() == [0, 1, 5, 10]
