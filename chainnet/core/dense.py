"""Fully connected layer."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .deriv import Deriv
from .errors import WrongGradientSize, WrongInputSize, WrongLayerSize
from .module import Intermediate, Network
from .types import Array, Bias, DTYPE, ParameterGenerator, Weight, as_vector


@dataclass(frozen=True)
class DenseRecord(Intermediate):
    """Weighted sums (bias included) and activations of one :class:`Dense` evaluation."""

    weighted_sums: Array
    outputs: Array

    @property
    def output(self) -> Array:
        return self.outputs


class Dense(Network):
    """A fully connected layer: ``activation(weights @ x + biases)``.

    ``weights`` has shape ``(num_out, num_in)``. The weight joining input
    ``j`` to output ``i`` is drawn with ``generator(Weight(layer, j, i))`` and
    the bias of output ``i`` with ``generator(Bias(layer + 1, i))``, so a stack
    of layers built with increasing ``layer`` indices asks the generator the
    same questions as a :class:`~chainnet.core.mlp.MatrixNetwork` of the same
    shape.
    """

    def __init__(
        self,
        num_in: int,
        num_out: int,
        activation: Deriv,
        generator: ParameterGenerator,
        *,
        layer: int = 0,
    ) -> None:
        if num_in < 1:
            raise WrongLayerSize(layer)
        if num_out < 1:
            raise WrongLayerSize(layer + 1)
        self.num_in = int(num_in)
        self.num_out = int(num_out)
        self.activation = activation
        weights = np.empty((self.num_out, self.num_in), dtype=DTYPE)
        for j in range(self.num_in):
            for i in range(self.num_out):
                weights[i, j] = generator(Weight(layer=layer, source=j, dest=i))
        self.weights = weights
        self.biases = np.array(
            [generator(Bias(layer=layer + 1, unit=i)) for i in range(self.num_out)],
            dtype=DTYPE,
        )

    def intermediate(self, inputs) -> DenseRecord:
        x = as_vector(inputs, self.num_in)
        sums = self.weights @ x + self.biases
        outputs = np.asarray(self.activation.call(sums), dtype=DTYPE)
        return DenseRecord(weighted_sums=sums, outputs=outputs)

    def train(self, inputs, record: DenseRecord, gradients, learning_rate: float) -> Array:
        x = as_vector(inputs, self.num_in)
        try:
            grad = as_vector(gradients, self.num_out)
        except WrongInputSize as exc:
            raise WrongGradientSize(exc.expected, exc.actual) from None
        delta = grad * self.activation.deriv(record.weighted_sums)
        # Propagate through the weights used by the forward pass.
        input_gradients = self.weights.T @ delta
        self.biases -= learning_rate * delta
        self.weights -= learning_rate * np.outer(delta, x)
        return input_gradients

    def __repr__(self) -> str:
        return f"Dense(num_in={self.num_in}, num_out={self.num_out}, activation={self.activation!r})"


__all__ = ["Dense", "DenseRecord"]
