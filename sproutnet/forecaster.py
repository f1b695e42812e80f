"""Forecasts of how many packets will arrive over upcoming ticks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np

from sproutnet.process import Process

logger = logging.getLogger(__name__)


def make_components(example: Process) -> list[Process]:
    """One copy of ``example`` per rate bin, each certain of that bin's rate."""
    components = []
    for midpoint, _, index in example.pmf.items():
        component = example.copy()
        component.set_certain(midpoint)
        if example.pmf.index(midpoint) != index:
            raise ValueError("rate bins do not map back to their midpoints")
        components.append(component)
    return components


def convolve(old_count_probabilities: Sequence[float], this_tick: Sequence[float]) -> np.ndarray:
    """Distribution of the sum of two independent counts."""
    return np.convolve(
        np.asarray(old_count_probabilities, dtype=float), np.asarray(this_tick, dtype=float)
    )


def _check_ensemble(ensemble: Process, table: np.ndarray, count: int) -> None:
    if not ensemble.normalized:
        raise ValueError("ensemble must be normalized")
    if table.shape[0] == 0:
        raise ValueError("forecast has no components")
    if len(ensemble.pmf) != table.shape[0]:
        raise ValueError("ensemble and forecast have different numbers of bins")
    if not 0 <= count < table.shape[1]:
        raise ValueError(f"count {count} outside the forecast")


class ProcessForecastTick:
    """Arrival-count distributions over one tick, for every certain rate."""

    def __init__(self, tick_time: float, example: Process, upper_limit: int) -> None:
        rows = []
        for component in make_components(example):
            probabilities = [component.count_probability(tick_time, i) for i in range(upper_limit)]
            probabilities.append(1.0 - sum(probabilities))
            rows.append(probabilities)
        self._count_probability = np.array(rows, dtype=float).reshape(len(rows), upper_limit + 1)

    def component_probability(self, component: int, count: int) -> float:
        return float(self._count_probability[component][count])

    def probability(self, ensemble: Process, count: int) -> float:
        """Chance of ``count`` arrivals in one tick under ``ensemble``."""
        _check_ensemble(ensemble, self._count_probability, count)
        return min(ensemble.pmf.summation(self._count_probability, count), 1.0)


class ProcessForecastInterval:
    """Cumulative arrival-count distributions over several ticks."""

    def __init__(self, count_probability: Iterable[Iterable[float]]) -> None:
        rows = [list(row) for row in count_probability]
        if len({len(row) for row in rows}) > 1:
            raise ValueError("all components need the same number of counts")
        width = len(rows[0]) if rows else 0
        self._count_probability = np.array(rows, dtype=float).reshape(len(rows), width)

    @classmethod
    def build(
        cls, tick_time: float, example: Process, tick_upper_limit: int, num_ticks: int
    ) -> ProcessForecastInterval:
        """Compute the forecast for ``num_ticks`` ticks of ``tick_time`` seconds."""
        tick_forecast = ProcessForecastTick(tick_time, example, tick_upper_limit)
        rows = []
        for component in make_components(example):
            probabilities = np.ones(1)
            for _ in range(num_ticks):
                component.normalize()
                this_tick = [tick_forecast.probability(component, i) for i in range(tick_upper_limit)]
                probabilities = convolve(probabilities, this_tick)
                component.evolve(tick_time)
            rows.append(probabilities.tolist())
        return cls(rows)

    @classmethod
    def from_model(cls, model: Iterable[Iterable[float]]) -> ProcessForecastInterval:
        """Restore a forecast saved with :meth:`to_model`."""
        return cls(model)

    def to_model(self) -> list[list[float]]:
        """The forecast as one list of count probabilities per component."""
        return self._count_probability.tolist()

    def probability(self, ensemble: Process, count: int) -> float:
        """Chance of exactly ``count`` arrivals over the interval."""
        _check_ensemble(ensemble, self._count_probability, count)
        result = ensemble.pmf.summation(self._count_probability, count)
        if result > 1.0:
            logger.error("Error, prob = %f", result)
            result = 1.0
        return result

    def lower_quantile(self, ensemble: Process, x: float) -> int:
        """Smallest count whose cumulative probability reaches ``x``."""
        width = self._count_probability.shape[1]
        if width:
            _check_ensemble(ensemble, self._count_probability, 0)
        raw = ensemble.pmf.values @ self._count_probability if width else np.zeros(0)
        if np.any(raw > 1.0):
            logger.error("Error, prob = %f", float(raw.max()))
        hits = np.nonzero(np.cumsum(np.minimum(raw, 1.0)) >= x)[0]
        if hits.size:
            return int(hits[0])
        return width + 1