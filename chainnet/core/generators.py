"""Parameter generators used to initialise weights and biases.

A generator is any callable mapping a :class:`~chainnet.core.types.Weight` or
:class:`~chainnet.core.types.Bias` request to a float. Random generators own
an explicit ``numpy.random.Generator`` so initialisation is reproducible from
a seed and never touches global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping

import numpy as np

from .types import Bias, ParamRequest, ParameterGenerator, Weight


@dataclass
class UniformGenerator:
    """Draw every parameter uniformly from ``[low, high)``."""

    rng: np.random.Generator | int | None = None
    low: float = -2.0
    high: float = 2.0
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.rng, np.random.Generator):
            self._rng = self.rng
        else:
            self._rng = np.random.default_rng(self.rng)

    def __call__(self, request: ParamRequest) -> float:
        return float(self._rng.uniform(self.low, self.high))


@dataclass(frozen=True)
class ConstantGenerator:
    """Use the same ``value`` for every weight and bias."""

    value: float = 0.0

    def __call__(self, request: ParamRequest) -> float:
        return float(self.value)


@dataclass(frozen=True)
class PairGenerator:
    """Adapt separate ``weights(source, dest)`` and ``biases(unit)`` functions."""

    weights: Callable[[int, int], float]
    biases: Callable[[int], float]

    def __call__(self, request: ParamRequest) -> float:
        if isinstance(request, Weight):
            return float(self.weights(request.source, request.dest))
        if isinstance(request, Bias):
            return float(self.biases(request.unit))
        raise TypeError(f"Unsupported parameter request: {request!r}")


def make_generator(config: Mapping[str, object] | None, seed: int = 0) -> ParameterGenerator:
    """Build a generator from ``{"name": "uniform" | "constant", ...}``."""

    options = dict(config or {"name": "uniform"})
    name = str(options.pop("name", "uniform"))
    if name == "uniform":
        return UniformGenerator(
            np.random.default_rng(seed),
            low=float(options.get("low", -2.0)),
            high=float(options.get("high", 2.0)),
        )
    if name == "constant":
        return ConstantGenerator(float(options.get("value", 0.0)))
    raise ValueError(f"Unknown generator: {name}")


__all__ = ["ConstantGenerator", "PairGenerator", "UniformGenerator", "make_generator"]
