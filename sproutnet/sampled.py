"""Functions sampled on a regular grid of bins, and the Poisson mass function."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence

import numpy as np

BIG = 1.0e6


def poisson_pdf(rate: float, counts: int) -> float:
    """Probability of ``counts`` arrivals from a Poisson process with mean ``rate``."""
    if rate < 0:
        raise ValueError(f"Poisson rate must be non-negative, got {rate}")
    if counts < 0:
        raise ValueError(f"count must be non-negative, got {counts}")
    if rate == 0:
        return 1.0 if counts == 0 else 0.0
    return math.exp(counts * math.log(rate) - rate - math.lgamma(counts + 1))


def _poisson_pdf_array(rates: np.ndarray, counts: int) -> np.ndarray:
    """Vectorised :func:`poisson_pdf` over an array of rates."""
    rates = np.asarray(rates, dtype=float)
    if counts < 0:
        raise ValueError(f"count must be non-negative, got {counts}")
    if np.any(rates < 0):
        raise ValueError("Poisson rates must be non-negative")
    out = np.empty_like(rates)
    zero = rates == 0
    out[zero] = 1.0 if counts == 0 else 0.0
    positive = rates[~zero]
    out[~zero] = np.exp(counts * np.log(positive) - positive - math.lgamma(counts + 1))
    return out


class SampledFunction:
    """A function of one real variable, held as one value per bin.

    Values are looked up by position on the real line: ``f[x]`` is the value
    of the bin that contains ``x``, with positions outside the grid clamped to
    the first or last bin.
    """

    def __init__(self, num_samples: int, maximum_value: float, minimum_value: float) -> None:
        if num_samples <= 0:
            raise ValueError("num_samples must be positive")
        self._offset = float(minimum_value)
        self._bin_width = (maximum_value - minimum_value) / num_samples
        if not self._bin_width > 0:
            raise ValueError("maximum_value must exceed minimum_value")
        size = int((maximum_value - minimum_value) / self._bin_width) + 1
        self.values = np.ones(size, dtype=float)

    # -- vectorised helpers -------------------------------------------------

    def _bins(self, x) -> np.ndarray:
        raw = np.trunc((np.asarray(x, dtype=float) - self._offset) / self._bin_width)
        return np.clip(raw, 0, len(self.values) - 1).astype(np.intp)

    def _floor_edges(self, bins) -> np.ndarray:
        bins = np.asarray(bins)
        return np.where(bins <= 0, -BIG, bins * self._bin_width + self._offset)

    def _ceil_edges(self, bins) -> np.ndarray:
        bins = np.asarray(bins)
        return np.where(
            bins >= len(self.values) - 1, BIG, (bins + 1) * self._bin_width + self._offset
        )

    def _midpoints(self) -> np.ndarray:
        mids = (np.arange(len(self.values)) + 0.5) * self._bin_width + self._offset
        mids[0] = self._offset
        return mids

    # -- public interface ---------------------------------------------------

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, x: float) -> float:
        return float(self.values[self.index(x)])

    def __setitem__(self, x: float, value: float) -> None:
        self.values[self.index(x)] = value

    def index(self, x: float) -> int:
        """Bin that holds position ``x``, clamped to the grid."""
        return int(self._bins(x))

    def midpoint(self, index: int) -> float:
        """Representative position of a bin (the lower edge for bin 0)."""
        if index == 0:
            return self._offset
        return (index + 0.5) * self._bin_width + self._offset

    def sample_floor(self, x: float) -> float:
        """Lower edge of the bin holding ``x``; -BIG for the first bin."""
        return float(self._floor_edges(self._bins(x)))

    def sample_ceil(self, x: float) -> float:
        """Upper edge of the bin holding ``x``; BIG for the last bin."""
        return float(self._ceil_edges(self._bins(x)))

    def items(self) -> Iterator[tuple[float, float, int]]:
        """Yield ``(midpoint, value, index)`` for every bin."""
        for index, (mid, value) in enumerate(
            zip(self._midpoints().tolist(), self.values.tolist())
        ):
            yield mid, value, index

    def apply(self, f: Callable[[float, float, int], float]) -> None:
        """Replace every value with ``f(midpoint, value, index)``."""
        self.values = np.array([f(mid, value, index) for mid, value, index in self.items()], dtype=float)

    def indices_in_range(self, low: float, high: float) -> range:
        """Bins from the one holding ``low`` through the one holding ``high``."""
        first = int(self._bins(self.sample_floor(low)))
        last = int(self._bins(self.sample_ceil(high)))
        return range(first, last + 1)

    def lower_quantile(self, x: float) -> float:
        """Lower edge of the first bin at which the running sum reaches ``x``."""
        cumulative = np.cumsum(self.values)
        hits = np.nonzero(cumulative >= x)[0]
        if hits.size:
            first = int(hits[0])
            return 0.0 if first == 0 else float(self._floor_edges(first))
        return float(self._floor_edges(len(self.values) - 1))

    def summation(self, count_probability: Sequence[Sequence[float]], count: int) -> float:
        """Sum over bins of value times ``count_probability[bin][count]``."""
        table = np.asarray(count_probability, dtype=float)
        if table.ndim != 2 or table.shape[0] != len(self.values):
            raise ValueError("count_probability must have one row per bin")
        return float(self.values @ table[:, count])

    def copy(self) -> SampledFunction:
        clone = object.__new__(SampledFunction)
        clone._offset = self._offset
        clone._bin_width = self._bin_width
        clone.values = self.values.copy()
        return clone