"""The differentiable module contract shared by every trainable block.

A :class:`Network` evaluates in two halves. ``intermediate`` runs the forward
pass and returns an :class:`Intermediate` record holding whatever the backward
pass needs; ``train`` consumes that record together with the gradient of the
error over the outputs, updates the parameters in place and returns the
gradient of the error over the inputs. Because every block speaks the same
protocol, layers, loss blocks and the combinators in
:mod:`chainnet.core.compose` nest without special cases.

``train`` must be called with the record produced by ``intermediate`` for the
same inputs. This is a documented precondition and is not checked.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .compose import Chain, Zip, Zipper


class Intermediate(ABC):
    """Retained forward-pass state of one evaluation."""

    @property
    @abstractmethod
    def output(self) -> Any:
        """The final output of the evaluation."""


@dataclass(frozen=True)
class ScalarRecord(Intermediate):
    """Record of a block reducing its inputs to one scalar, such as an error block."""

    value: float

    @property
    def output(self) -> float:
        return self.value


class Network(ABC):
    """A differentiable, trainable block."""

    @abstractmethod
    def intermediate(self, inputs) -> Intermediate:
        """Evaluate the block without touching its parameters."""

    @abstractmethod
    def train(self, inputs, record: Intermediate, gradients, learning_rate: float):
        """Run one gradient-descent step and return the gradients over ``inputs``."""

    def eval(self, inputs):
        """Evaluate the block and return only its output."""

        return self.intermediate(inputs).output

    def train_step(self, inputs, record: Intermediate, learning_rate: float):
        """Train with an output gradient of ones.

        This is the natural seed when the block ends in a scalar error
        function, where the gradient of the error over itself is one.
        """

        output = record.output
        if np.isscalar(output) or np.ndim(output) == 0:
            seed = 1.0
        else:
            seed = np.ones_like(np.asarray(output, dtype=np.float64))
        return self.train(inputs, record, seed, learning_rate)

    def chain(self, next_block: "Network") -> "Chain":
        """Connect ``next_block`` to the outputs of this block."""

        from .compose import Chain

        return Chain(self, next_block)

    def zip(self, other: "Network", zipper: "Zipper") -> "Zip":
        """Run this block and ``other`` side by side, merging outputs with ``zipper``."""

        from .compose import Zip

        return Zip(self, other, zipper)


__all__ = ["Intermediate", "Network", "ScalarRecord"]
