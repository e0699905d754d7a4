"""Network composition.

:class:`Chain` connects two blocks one after the other; :class:`Zip` runs two
blocks side by side and merges their outputs into one value. Both are
:class:`~chainnet.core.module.Network` instances themselves, so they nest to
any depth::

    net = (
        Dense(1, 5, Logistic(), gen)
        .chain(Dense(5, 5, Logistic(), gen))
        .zip(Dense(5, 5, Logistic(), gen), Stacker(5, 5))
        .chain(SquareError(expected))
    )
    record = net.intermediate((x_top, x_bot))
    net.train_step((x_top, x_bot), record, 0.1)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Tuple

import numpy as np

from .errors import WrongGradientSize, WrongInputSize
from .module import Intermediate, Network
from .types import Array, as_vector


@dataclass(frozen=True)
class ChainRecord(Intermediate):
    """Records of both halves of a :class:`Chain` evaluation."""

    first: Intermediate
    second: Intermediate

    @property
    def output(self) -> Any:
        return self.second.output


class Chain(Network):
    """Feed the outputs of ``first`` into ``second``."""

    def __init__(self, first: Network, second: Network) -> None:
        self.first = first
        self.second = second

    def intermediate(self, inputs) -> ChainRecord:
        first = self.first.intermediate(inputs)
        second = self.second.intermediate(first.output)
        return ChainRecord(first=first, second=second)

    def train(self, inputs, record: ChainRecord, gradients, learning_rate: float):
        # The first block needs the gradients over the second block's inputs,
        # so the second block always trains first.
        boundary = self.second.train(record.first.output, record.second, gradients, learning_rate)
        return self.first.train(inputs, record.first, boundary, learning_rate)

    def __repr__(self) -> str:
        return f"Chain({self.first!r}, {self.second!r})"


class Zipper(ABC):
    """Merge two outputs into one value and split gradients back apart.

    ``unzip`` must be the exact inverse of ``zip``: for any outputs ``a`` and
    ``b``, ``unzip(zip(a, b))`` gives back ``(a, b)``. :class:`Zip` relies on
    this to route gradients and cannot verify it.
    """

    @abstractmethod
    def zip(self, top, bot):
        """Combine the outputs of the top and bottom blocks."""

    @abstractmethod
    def unzip(self, merged) -> Tuple[Any, Any]:
        """Split a merged value (or its gradients) into ``(top, bot)``."""


@dataclass(frozen=True)
class Stacker(Zipper):
    """Concatenate a ``top_size`` vector with a ``bot_size`` vector."""

    top_size: int
    bot_size: int

    @property
    def size(self) -> int:
        return self.top_size + self.bot_size

    def zip(self, top, bot) -> Array:
        return np.concatenate([as_vector(top, self.top_size), as_vector(bot, self.bot_size)])

    def unzip(self, merged) -> Tuple[Array, Array]:
        vec = as_vector(merged, self.size)
        return vec[: self.top_size], vec[self.top_size :]


class PairZipper(Zipper):
    """Keep both outputs as a ``(top, bot)`` tuple."""

    def zip(self, top, bot) -> Tuple[Any, Any]:
        return (top, bot)

    def unzip(self, merged) -> Tuple[Any, Any]:
        top, bot = merged
        return top, bot


@dataclass(frozen=True)
class FunctionZipper(Zipper):
    """Use a pair of caller-supplied functions as a :class:`Zipper`."""

    zip_fn: Callable[[Any, Any], Any]
    unzip_fn: Callable[[Any], Tuple[Any, Any]]

    def zip(self, top, bot):
        return self.zip_fn(top, bot)

    def unzip(self, merged) -> Tuple[Any, Any]:
        return self.unzip_fn(merged)


@dataclass(frozen=True)
class ZipRecord(Intermediate):
    """Records of both branches of a :class:`Zip` plus the merged output."""

    top: Intermediate
    bot: Intermediate
    zipped: Any

    @property
    def output(self) -> Any:
        return self.zipped


class Zip(Network):
    """Evaluate ``top`` and ``bot`` on the two halves of a paired input.

    The branches own disjoint parameters, so they train independently of one
    another; the returned input gradients are a ``(top, bot)`` pair.
    """

    def __init__(self, top: Network, bot: Network, zipper: Zipper) -> None:
        self.top = top
        self.bot = bot
        self.zipper = zipper

    def intermediate(self, inputs) -> ZipRecord:
        top_in, bot_in = _split_pair(inputs)
        top = self.top.intermediate(top_in)
        bot = self.bot.intermediate(bot_in)
        return ZipRecord(top=top, bot=bot, zipped=self.zipper.zip(top.output, bot.output))

    def train(self, inputs, record: ZipRecord, gradients, learning_rate: float):
        top_in, bot_in = _split_pair(inputs)
        try:
            top_grad, bot_grad = self.zipper.unzip(gradients)
        except WrongInputSize as exc:
            raise WrongGradientSize(exc.expected, exc.actual) from None
        top = self.top.train(top_in, record.top, top_grad, learning_rate)
        bot = self.bot.train(bot_in, record.bot, bot_grad, learning_rate)
        return (top, bot)

    def __repr__(self) -> str:
        return f"Zip({self.top!r}, {self.bot!r}, {self.zipper!r})"


def _split_pair(inputs) -> Tuple[Any, Any]:
    try:
        top, bot = inputs
    except (TypeError, ValueError):
        raise TypeError("Zip inputs must be a (top, bot) pair") from None
    return top, bot


__all__ = [
    "Chain",
    "ChainRecord",
    "FunctionZipper",
    "PairZipper",
    "Stacker",
    "Zip",
    "ZipRecord",
    "Zipper",
]
