"""Core numerical primitives for chainnet."""

from . import activations, compose, deriv, errors, generators, types
from .compose import Chain, Stacker, Zip
from .dense import Dense
from .mlp import MatrixNetwork
from .module import Intermediate, Network

__all__ = [
    "Chain",
    "Dense",
    "Intermediate",
    "MatrixNetwork",
    "Network",
    "Stacker",
    "Zip",
    "activations",
    "compose",
    "deriv",
    "errors",
    "generators",
    "types",
]
