"""Losses, training driver and pipeline assembly."""

from .losses import REGISTRY, AbsoluteError, Loss, SquareError
from .trainer import DivergenceError, SGDSchedule, Trainer

__all__ = [
    "AbsoluteError",
    "DivergenceError",
    "Loss",
    "REGISTRY",
    "SGDSchedule",
    "SquareError",
    "Trainer",
]
