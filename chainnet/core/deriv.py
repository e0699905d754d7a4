"""Functions bundled with their derivatives.

``Deriv`` is the one-dimensional form used by activations: ``call`` and
``deriv`` act element-wise, so they accept either a scalar or an array.
``NDeriv`` is the multi-input form used by error functions: it reduces a
vector to a scalar and exposes the partial derivative on each input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .types import Array, DTYPE, as_vector


class Deriv(ABC):
    """A pure element-wise function together with its derivative."""

    @abstractmethod
    def call(self, x):
        """Return ``f(x)``."""

    @abstractmethod
    def deriv(self, x):
        """Return ``f'(x)``."""

    def __call__(self, x):
        return self.call(x)


@dataclass(frozen=True)
class FunctionPair(Deriv):
    """Any two callables ``(f, f')`` used as a :class:`Deriv`."""

    fn: Callable
    dfn: Callable

    def call(self, x):
        return self.fn(x)

    def deriv(self, x):
        return self.dfn(x)


class NDeriv(ABC):
    """A pure multi-input function with its partial derivatives."""

    @abstractmethod
    def call(self, x: Array) -> float:
        """Return the function value at ``x``."""

    @abstractmethod
    def deriv(self, x: Array, p: int) -> float:
        """Return the partial derivative on input ``p`` at ``x``."""

    def gradient(self, x: Array) -> Array:
        """Return every partial derivative at ``x`` as one vector."""

        x = as_vector(x)
        return np.array([self.deriv(x, p) for p in range(x.shape[0])], dtype=DTYPE)


@dataclass(frozen=True)
class _Lifted(NDeriv):
    inner: Deriv

    def call(self, x: Array) -> float:
        return float(self.inner.call(as_vector(x, 1)[0]))

    def deriv(self, x: Array, p: int) -> float:
        return float(self.inner.deriv(as_vector(x, 1)[0]))


def lift(fn: Deriv) -> NDeriv:
    """View a one-dimensional ``fn`` as an :class:`NDeriv` over one-element vectors."""

    return _Lifted(fn)


__all__ = ["Deriv", "FunctionPair", "NDeriv", "lift"]
