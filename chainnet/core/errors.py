"""Errors raised by the network core."""

from __future__ import annotations


class NetworkError(ValueError):
    """Base class for structural errors reported by chainnet."""


class WrongSize(NetworkError):
    """The network was declared with fewer than two layers."""

    def __init__(self) -> None:
        super().__init__("the network should have 2 or more layers")


class WrongLayerSize(NetworkError):
    """A declared layer has no units."""

    def __init__(self, layer: int) -> None:
        self.layer = layer
        super().__init__(f"layer {layer} should have 1 or more nodes")


class WrongInputSize(NetworkError):
    """An input vector does not match the declared input width."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {expected} inputs, got {actual}")


class WrongGradientSize(WrongInputSize):
    """An output-gradient vector does not match the module's output width."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(expected, actual)
        self.args = (f"expected {expected} output gradients, got {actual}",)


__all__ = [
    "NetworkError",
    "WrongGradientSize",
    "WrongInputSize",
    "WrongLayerSize",
    "WrongSize",
]
