"""A Bayesian model of an unknown, drifting packet-arrival rate."""

from __future__ import annotations

import math
from functools import lru_cache

import numpy as np

from sproutnet.sampled import SampledFunction, _poisson_pdf_array, poisson_pdf

_GAUSSIAN_OVERSAMPLING = 128


def _normal_cdf(x: np.ndarray, stddev: float) -> np.ndarray:
    scale = stddev * math.sqrt(2.0)
    return np.array([0.5 * math.erfc(-value / scale) for value in x.tolist()], dtype=float)


@lru_cache(maxsize=64)
def _transition(bins: int, maximum_rate: float, stddev: float) -> np.ndarray:
    """Probability of moving from each rate bin to each other one."""
    pmf = SampledFunction(bins, maximum_rate, 0.0)
    gaussian = SampledFunction(bins * _GAUSSIAN_OVERSAMPLING, maximum_rate, -maximum_rate)
    gaussian.values = _normal_cdf(gaussian._midpoints(), stddev)

    size = len(pmf)
    indices = np.arange(size)
    mids = pmf._midpoints()
    low = pmf._bins(pmf._floor_edges(pmf._bins(mids - 5 * stddev)))
    high = pmf._bins(pmf._ceil_edges(pmf._bins(mids + 5 * stddev)))

    new_bins = pmf._bins(mids)
    ceil_edges = pmf._ceil_edges(new_bins)
    floor_edges = pmf._floor_edges(new_bins)

    upper = gaussian.values[gaussian._bins(ceil_edges[None, :] - mids[:, None])]
    lower = gaussian.values[gaussian._bins(floor_edges[None, :] - mids[:, None])]
    in_range = (indices[None, :] >= low[:, None]) & (indices[None, :] <= high[:, None])

    matrix = np.where(in_range, upper - lower, 0.0)
    matrix.setflags(write=False)
    return matrix


class Process:
    """Probability distribution over an arrival rate, with Brownian drift and outages."""

    def __init__(
        self,
        maximum_rate: float,
        brownian_motion_rate: float,
        outage_escape_rate: float,
        bins: int,
    ) -> None:
        self._maximum_rate = float(maximum_rate)
        self._bins = int(bins)
        self._brownian_motion_rate = float(brownian_motion_rate)
        self._outage_escape_rate = float(outage_escape_rate)
        self.pmf = SampledFunction(self._bins, self._maximum_rate, 0.0)
        self.normalized = False
        self.normalize()

    def evolve(self, time: float) -> None:
        """Let the rate drift for ``time`` seconds."""
        self.normalized = False
        stddev = self._brownian_motion_rate * math.sqrt(time)
        if not stddev > 0:
            raise ValueError("evolution needs a positive spread of the rate")
        matrix = _transition(self._bins, self._maximum_rate, stddev)

        escape = 1.0 - poisson_pdf(time * self._outage_escape_rate, 0)
        if not 0.0 <= escape <= 1.0:
            raise ValueError("outage escape probability out of range")

        old = self.pmf.values
        new = old[1:] @ matrix[1:]
        from_zero = matrix[0] * escape
        from_zero[0] = matrix[0, 0] * (1.0 - escape)
        new += old[0] * from_zero
        self.pmf.values = new

    def observe(self, time: float, counts: int) -> None:
        """Condition on ``counts`` arrivals seen in ``time`` seconds."""
        self.normalized = False
        self.pmf.values = self.pmf.values * _poisson_pdf_array(self.pmf._midpoints() * time, counts)

    def normalize(self) -> None:
        """Scale the distribution to sum to one."""
        if self.normalized:
            return
        total = float(self.pmf.values.sum())
        self.pmf.values = self.pmf.values / total
        self.normalized = True

    def lower_quantile(self, x: float) -> float:
        return self.pmf.lower_quantile(x)

    def set_certain(self, rate: float) -> None:
        """Put all probability on the bin holding ``rate``."""
        self.normalized = False
        values = np.zeros(len(self.pmf))
        values[self.pmf.index(rate)] = 1.0
        self.pmf.values = values
        self.normalize()

    def count_probability(self, time: float, counts: int) -> float:
        """Chance of ``counts`` arrivals in ``time`` seconds, without drift."""
        likelihood = _poisson_pdf_array(self.pmf._midpoints() * time, counts)
        return float(np.dot(self.pmf.values, likelihood))

    def copy(self) -> Process:
        clone = object.__new__(Process)
        clone._maximum_rate = self._maximum_rate
        clone._bins = self._bins
        clone._brownian_motion_rate = self._brownian_motion_rate
        clone._outage_escape_rate = self._outage_escape_rate
        clone.pmf = self.pmf.copy()
        clone.normalized = self.normalized
        return clone