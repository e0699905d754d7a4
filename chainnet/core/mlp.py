"""Matrix-based multilayer network with in-place backpropagation.

:class:`MatrixNetwork` is the monolithic counterpart of a chain of
:class:`~chainnet.core.dense.Dense` layers. Every layer shares one activation
function and the layer widths are only known at runtime, so the whole network
is a list of weight matrices and bias vectors walked by two plain loops
instead of a tree of nested combinators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .deriv import Deriv, NDeriv
from .errors import WrongLayerSize, WrongSize
from .types import Array, Bias, DTYPE, ParameterGenerator, Weight, as_vector


@dataclass
class MultilayerRecord:
    """Intermediate values of one :class:`MatrixNetwork` evaluation.

    Attributes
    ----------
    activations:
        Activation of every layer, starting with the inputs and ending with
        the outputs.
    sums:
        Weighted sums ``W @ a`` of every layer after the input layer, before
        the bias is added.
    """

    activations: List[Array]
    sums: List[Array]

    @property
    def output(self) -> Array:
        return self.activations[-1]


class MatrixNetwork:
    """A fully connected network of arbitrary depth.

    ``weights[l]`` has shape ``(sizes[l + 1], sizes[l])``: rows index the
    next layer, columns the current one. ``biases[l - 1]`` holds the biases of
    layer ``l`` for ``l >= 1``.
    """

    def __init__(
        self,
        sizes: Sequence[int],
        generator: ParameterGenerator,
        activation: Deriv,
    ) -> None:
        sizes = [int(s) for s in sizes]
        if len(sizes) < 2:
            raise WrongSize()
        for layer, size in enumerate(sizes):
            if size < 1:
                raise WrongLayerSize(layer)

        weights: List[Array] = []
        for l in range(len(sizes) - 1):
            matrix = np.empty((sizes[l + 1], sizes[l]), dtype=DTYPE)
            for j in range(sizes[l]):
                for i in range(sizes[l + 1]):
                    matrix[i, j] = generator(Weight(layer=l, source=j, dest=i))
            weights.append(matrix)
        biases: List[Array] = []
        for l in range(1, len(sizes)):
            biases.append(
                np.array([generator(Bias(layer=l, unit=i)) for i in range(sizes[l])], dtype=DTYPE)
            )

        self.sizes: Tuple[int, ...] = tuple(sizes)
        self.activation = activation
        self.weights = weights
        self.biases = biases

    # ------------------------------------------------------------------
    # Accessors

    def weight(self, layer: int, source: int, dest: int) -> Optional[float]:
        """Return the weight from ``source`` in ``layer`` to ``dest`` in ``layer + 1``."""

        if not 0 <= layer < len(self.weights):
            return None
        matrix = self.weights[layer]
        if not (0 <= dest < matrix.shape[0] and 0 <= source < matrix.shape[1]):
            return None
        return float(matrix[dest, source])

    def bias(self, layer: int, unit: int) -> Optional[float]:
        """Return the bias of ``unit`` in ``layer``; the input layer has none."""

        if not 1 <= layer < len(self.sizes):
            return None
        values = self.biases[layer - 1]
        if not 0 <= unit < values.shape[0]:
            return None
        return float(values[unit])

    def parameter_count(self) -> int:
        return int(sum(w.size for w in self.weights) + sum(b.size for b in self.biases))

    # ------------------------------------------------------------------
    # Evaluation

    def _forward(self, inputs, record: Optional[MultilayerRecord]) -> Array:
        activ = as_vector(inputs, self.sizes[0])
        for weights, biases in zip(self.weights, self.biases):
            weighted = weights @ activ
            if record is not None:
                record.activations.append(activ)
                record.sums.append(weighted)
            activ = np.asarray(self.activation.call(weighted + biases), dtype=DTYPE)
        if record is not None:
            record.activations.append(activ)
        return activ

    def eval(self, inputs) -> Array:
        """Evaluate the network and return the output layer."""

        return self._forward(inputs, None)

    def eval_intermediate(self, inputs) -> MultilayerRecord:
        """Evaluate the network and keep every activation and weighted sum."""

        record = MultilayerRecord(activations=[], sums=[])
        self._forward(inputs, record)
        return record

    # ------------------------------------------------------------------
    # Training

    def backprop_deriv(
        self,
        record: MultilayerRecord,
        error: NDeriv,
        learning_rate: float,
    ) -> Tuple[float, Array]:
        """Run one backpropagation step in place.

        Returns the error at the recorded outputs and the gradients of that
        error over the input layer.
        """

        outputs = record.activations[-1]
        value = float(error.call(outputs))
        derivs = np.asarray(error.gradient(outputs), dtype=DTYPE)

        for l in reversed(range(len(self.weights))):
            weights = self.weights[l]
            biases = self.biases[l]
            delta = derivs * self.activation.deriv(record.sums[l] + biases)
            biases -= learning_rate * delta
            # Gradients for the previous layer go through the weights used by
            # the forward pass, so they are taken before the update.
            derivs = delta @ weights
            weights -= learning_rate * np.outer(delta, record.activations[l])

        return value, derivs

    def backprop(self, record: MultilayerRecord, error: NDeriv, learning_rate: float) -> float:
        """Like :meth:`backprop_deriv` but return only the error."""

        return self.backprop_deriv(record, error, learning_rate)[0]

    # ------------------------------------------------------------------

    def __str__(self) -> str:
        lines: List[str] = []
        for weights, biases in zip(self.weights, self.biases):
            for row in weights:
                lines.append("|" + "".join(_fmt_entry(w) for w in row) + " |")
            lines.append("{" + "".join(_fmt_entry(b) for b in biases) + " }")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"MatrixNetwork(sizes={list(self.sizes)}, activation={self.activation!r})"


def _fmt_entry(value: float) -> str:
    if value < 0.0:
        return f" {value:.2f}"
    return f" {value:.3f}"


__all__ = ["MatrixNetwork", "MultilayerRecord"]
