"""Core typing contracts for chainnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Union

import numpy as np

from .errors import WrongInputSize

Array = np.ndarray

DTYPE = np.float64


@dataclass(frozen=True)
class Weight:
    """Request for the weight between ``source`` in ``layer`` and ``dest`` in ``layer + 1``.

    ``layer`` ranges over ``[0, n - 2]`` for an ``n``-layer network.
    """

    layer: int
    source: int
    dest: int


@dataclass(frozen=True)
class Bias:
    """Request for the bias of ``unit`` in ``layer`` (``layer`` in ``[1, n - 1]``)."""

    layer: int
    unit: int


ParamRequest = Union[Weight, Bias]


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`chainnet.training.trainer.Trainer.run`."""

    steps: int
    final_error: float
    metrics_path: str = ""
    manifest_path: str = ""
    summary_path: str = ""


ParameterGenerator = Callable[[ParamRequest], float]


def as_vector(values: Sequence[float] | Array, size: int | None = None) -> Array:
    """Return ``values`` as a 1-D ``float64`` array, validating its length."""

    vec = np.asarray(values, dtype=DTYPE)
    if vec.ndim == 0:
        vec = vec.reshape(1)
    if vec.ndim != 1:
        raise WrongInputSize(size if size is not None else -1, int(vec.size))
    if size is not None and vec.shape[0] != size:
        raise WrongInputSize(size, int(vec.shape[0]))
    return vec


__all__ = [
    "Array",
    "Bias",
    "DTYPE",
    "ParamRequest",
    "ParameterGenerator",
    "RunResult",
    "Weight",
    "as_vector",
]
