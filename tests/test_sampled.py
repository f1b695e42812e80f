import math

import numpy as np
import pytest

from sproutnet.sampled import SampledFunction, poisson_pdf

BIG = 1.0e6


@pytest.fixture
def func():
    return SampledFunction(4, 8.0, 0.0)


def test_poisson_zero_rate():
    assert poisson_pdf(0, 0) == 1.0
    assert poisson_pdf(0, 3) == 0.0


def test_poisson_sums_to_one():
    assert sum(poisson_pdf(2.5, k) for k in range(100)) == pytest.approx(1.0)


def test_poisson_zero_count_is_exponential():
    assert poisson_pdf(1.5, 0) == pytest.approx(math.exp(-1.5))


def test_poisson_negative_rate_raises():
    with pytest.raises(ValueError):
        poisson_pdf(-1.0, 0)


def test_size_and_initial_values(func):
    assert len(func) == 5
    assert all(value == 1.0 for _, value, _ in func.items())


def test_index_clamps(func):
    assert func.index(-100.0) == 0
    assert func.index(100.0) == len(func) - 1


def test_midpoints_map_back_to_their_bin(func):
    assert func.midpoint(0) == 0.0
    assert func.midpoint(1) == 3.0
    assert all(func.index(mid) == index for mid, _, index in func.items())


def test_edges(func):
    assert func.sample_floor(0.5) == -BIG
    assert func.sample_ceil(100.0) == BIG
    mid = func.midpoint(2)
    assert func.sample_floor(mid) < mid < func.sample_ceil(mid)


def test_set_and_get_share_bin(func):
    func[3.0] = 0.25
    assert func[3.5] == 0.25
    assert func[5.0] == 1.0


def test_apply_uses_index(func):
    func.apply(lambda mid, value, index: value * index)
    assert [value for _, value, _ in func.items()] == [0.0, 1.0, 2.0, 3.0, 4.0]


def test_indices_in_range_cover_endpoints(func):
    covered = func.indices_in_range(2.5, 5.5)
    assert func.index(2.5) in covered
    assert func.index(5.5) in covered
    assert covered[0] <= func.index(2.5)


def test_lower_quantile_first_bin_is_zero(func):
    func.apply(lambda mid, value, index: 1.0 if index == 0 else 0.0)
    assert func.lower_quantile(0.5) == 0


def test_lower_quantile_last_bin(func):
    last = len(func) - 1
    func.apply(lambda mid, value, index: 1.0 if index == last else 0.0)
    assert func.lower_quantile(0.5) == func.sample_floor(func.midpoint(last))


def test_lower_quantile_never_reached(func):
    func.apply(lambda mid, value, index: 0.0)
    assert func.lower_quantile(0.5) == func.sample_floor(func.midpoint(len(func) - 1))


def test_summation_with_identity(func):
    func.apply(lambda mid, value, index: float(index))
    assert func.summation(np.eye(len(func)), 3) == 3.0


def test_summation_rejects_wrong_rows(func):
    with pytest.raises(ValueError):
        func.summation([[1.0]], 0)


def test_copy_is_independent(func):
    clone = func.copy()
    clone[0.0] = 5.0
    assert func[0.0] == 1.0
    assert clone[0.0] == 5.0
    assert len(clone) == len(func)