"""chainnet public API."""

from .core import activations, compose, errors, generators, types  # noqa: F401
from .core.activations import Identity, LeakyRelu, Logistic, Tanh
from .core.compose import Chain, FunctionZipper, PairZipper, Stacker, Zip, Zipper
from .core.dense import Dense
from .core.deriv import Deriv, FunctionPair, NDeriv
from .core.errors import NetworkError, WrongGradientSize, WrongInputSize, WrongLayerSize, WrongSize
from .core.generators import ConstantGenerator, PairGenerator, UniformGenerator
from .core.mlp import MatrixNetwork, MultilayerRecord
from .core.module import Intermediate, Network
from .core.types import Bias, Weight
from .data import Sample
from .training.losses import AbsoluteError, SquareError
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import DivergenceError, SGDSchedule, Trainer

__all__ = [
    "AbsoluteError",
    "Bias",
    "Chain",
    "ConstantGenerator",
    "Dense",
    "Deriv",
    "DivergenceError",
    "FunctionPair",
    "FunctionZipper",
    "Identity",
    "Intermediate",
    "LeakyRelu",
    "Logistic",
    "MatrixNetwork",
    "MultilayerRecord",
    "NDeriv",
    "Network",
    "NetworkError",
    "PairGenerator",
    "PairZipper",
    "SGDSchedule",
    "Sample",
    "SquareError",
    "Stacker",
    "Tanh",
    "Trainer",
    "UniformGenerator",
    "Weight",
    "WrongGradientSize",
    "WrongInputSize",
    "WrongLayerSize",
    "WrongSize",
    "Zip",
    "Zipper",
    "load_preset",
    "presets",
    "run_pipeline",
]
