"""neuralnetlib public API."""

from .core import activations, initializers  # noqa: F401
from .core.activations import HYPERBOLIC_TANGENT, RELU, SIGMOID
from .core.builder import build
from .core.initializers import (
    RandomWeightInitialization,
    XavierNormalInitialization,
    XavierUniformInitialization,
)
from .core.network import Connection, NeuralNetwork, Neuron
from .core.types import TrainingData, TrainingResult, TrainingStatus
from .errors import InvalidDataError, ShapeMismatch
from .logs import configure_logging
from .training.backprop import Backpropagation
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "activations",
    "initializers",
    "SIGMOID",
    "HYPERBOLIC_TANGENT",
    "RELU",
    "build",
    "RandomWeightInitialization",
    "XavierNormalInitialization",
    "XavierUniformInitialization",
    "Connection",
    "Neuron",
    "NeuralNetwork",
    "TrainingData",
    "TrainingResult",
    "TrainingStatus",
    "ShapeMismatch",
    "InvalidDataError",
    "configure_logging",
    "Backpropagation",
    "Trainer",
    "load_preset",
    "presets",
    "run_pipeline",
]
