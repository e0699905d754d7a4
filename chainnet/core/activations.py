"""Activation functions for chainnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping

import numpy as np

from .deriv import Deriv


@dataclass(frozen=True)
class LeakyRelu(Deriv):
    """Leaky rectified linear unit with negative-side ``slope``."""

    slope: float = 0.01

    def call(self, x):
        return np.where(np.asarray(x) > 0.0, x, self.slope * np.asarray(x))

    def deriv(self, x):
        return np.where(np.asarray(x) > 0.0, 1.0, self.slope)


@dataclass(frozen=True)
class Tanh(Deriv):
    """Hyperbolic tangent."""

    def call(self, x):
        return np.tanh(x)

    def deriv(self, x):
        return 1.0 - np.tanh(x) ** 2


@dataclass(frozen=True)
class Logistic(Deriv):
    """Logistic sigmoid."""

    def call(self, x):
        return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))

    def deriv(self, x):
        a = self.call(x)
        return a * (1.0 - a)


@dataclass(frozen=True)
class Identity(Deriv):
    """Linear pass-through, mostly useful in tests."""

    def call(self, x):
        return np.asarray(x, dtype=np.float64)

    def deriv(self, x):
        return np.ones_like(np.asarray(x, dtype=np.float64))


_ACTIVATIONS: Dict[str, Callable[..., Deriv]] = {
    "leaky_relu": LeakyRelu,
    "tanh": Tanh,
    "logistic": Logistic,
    "sigmoid": Logistic,
    "identity": Identity,
}


def make_activation(config: str | Mapping[str, object]) -> Deriv:
    """Build an activation from ``"name"`` or ``{"name": ..., **options}``."""

    if isinstance(config, str):
        config = {"name": config}
    options = dict(config)
    name = str(options.pop("name", "leaky_relu"))
    try:
        factory = _ACTIVATIONS[name]
    except KeyError as exc:
        available = ", ".join(sorted(_ACTIVATIONS))
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}") from exc
    return factory(**options)


__all__ = ["Identity", "LeakyRelu", "Logistic", "Tanh", "make_activation"]
