"""Error functions and the loss registry.

Each loss is an :class:`~chainnet.core.deriv.NDeriv` over the network outputs
(so :meth:`~chainnet.core.mlp.MatrixNetwork.backprop` can use it) and also a
terminal :class:`~chainnet.core.module.Network` mapping a vector to a scalar
error (so ``model.chain(loss)`` is trainable end to end). The target lives in
``expected`` and may be replaced between steps.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Sequence

import numpy as np

from ..core.deriv import NDeriv
from ..core.module import Network, ScalarRecord
from ..core.types import Array, as_vector


class Loss(NDeriv, Network):
    """Base class for error functions against an ``expected`` vector."""

    name = "loss"

    def __init__(self, expected: Sequence[float] | Array) -> None:
        self.expected = expected

    @property
    def expected(self) -> Array:
        return self._expected

    @expected.setter
    def expected(self, value: Sequence[float] | Array) -> None:
        self._expected = as_vector(value)

    def _check(self, x) -> Array:
        return as_vector(x, self._expected.shape[0])

    # NDeriv -----------------------------------------------------------

    def call(self, x) -> float:
        return float(np.sum(self._elementwise(self._check(x) - self._expected)))

    def deriv(self, x, p: int) -> float:
        x = self._check(x)
        return float(self._partial(x[p : p + 1] - self._expected[p : p + 1])[0])

    def gradient(self, x) -> Array:
        return self._partial(self._check(x) - self._expected)

    # Network ----------------------------------------------------------

    def intermediate(self, inputs) -> ScalarRecord:
        return ScalarRecord(self.call(inputs))

    def train(self, inputs, record: ScalarRecord, gradients, learning_rate: float) -> Array:
        return self.gradient(inputs) * float(np.asarray(gradients).reshape(-1)[0])

    # ------------------------------------------------------------------

    def _elementwise(self, diff: Array) -> Array:
        raise NotImplementedError

    def _partial(self, diff: Array) -> Array:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(expected={self._expected.tolist()})"


class SquareError(Loss):
    """Sum of squared differences, ``sum((x - e) ** 2)``."""

    name = "square"

    def _elementwise(self, diff: Array) -> Array:
        return diff * diff

    def _partial(self, diff: Array) -> Array:
        return 2.0 * diff


class AbsoluteError(Loss):
    """Sum of absolute differences, ``sum(|x - e|)``.

    The partial derivative is ``sign(x - e)``, which is zero at the target.
    """

    name = "absolute"

    def _elementwise(self, diff: Array) -> Array:
        return np.abs(diff)

    def _partial(self, diff: Array) -> Array:
        return np.sign(diff)


LossFactory = Callable[[Sequence[float]], Loss]


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, LossFactory] = {}

    def register(self, name: str, factory: LossFactory) -> None:
        self._registry[name] = factory

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def create(self, name: str, expected: Sequence[float]) -> Loss:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name](expected)


REGISTRY = LossRegistry()

REGISTRY.register("square", SquareError)
REGISTRY.register("absolute", AbsoluteError)
# Aliases for parity with common naming
REGISTRY.register("mse", SquareError)
REGISTRY.register("mae", AbsoluteError)
REGISTRY.register("sum", AbsoluteError)

__all__ = ["AbsoluteError", "Loss", "LossRegistry", "REGISTRY", "SquareError"]
