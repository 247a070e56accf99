"""Activation functions for neuralnetlib.

Every function exposes ``invoke`` and a ``derivative`` expressed in terms of
the activation *output*, so backpropagation can reuse the value a neuron
already holds instead of recomputing its weighted input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Protocol

import numpy as np


class ActivationFunction(Protocol):
    """Protocol implemented by neuron activation functions."""

    name: str

    def invoke(self, value: float) -> float:
        """Return the activation of the weighted input ``value``."""

    def derivative(self, output: float) -> float:
        """Return the slope at the point whose activation is ``output``."""


@dataclass(frozen=True)
class Sigmoid:
    """Logistic function squashing into ``(0, 1)``."""

    name: str = "sigmoid"

    def invoke(self, value: float) -> float:
        return float(1.0 / (1.0 + np.exp(-value)))

    def derivative(self, output: float) -> float:
        return output * (1.0 - output)


@dataclass(frozen=True)
class HyperbolicTangent:
    """Hyperbolic tangent squashing into ``(-1, 1)``."""

    name: str = "tanh"

    def invoke(self, value: float) -> float:
        return math.tanh(value)

    def derivative(self, output: float) -> float:
        return (1.0 - output) * (1.0 + output)


@dataclass(frozen=True)
class ReLU:
    """Rectified linear unit."""

    name: str = "relu"

    def invoke(self, value: float) -> float:
        return float(np.maximum(value, 0.0))

    def derivative(self, output: float) -> float:
        return 1.0 if output > 0 else 0.0


SIGMOID = Sigmoid()
HYPERBOLIC_TANGENT = HyperbolicTangent()
RELU = ReLU()

_REGISTRY: Dict[str, ActivationFunction] = {
    fn.name: fn for fn in (SIGMOID, HYPERBOLIC_TANGENT, RELU)
}


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


def get_activation(name: str) -> ActivationFunction:
    """Return the shared activation registered under ``name``."""

    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[key]


__all__ = [
    "ActivationFunction",
    "Sigmoid",
    "HyperbolicTangent",
    "ReLU",
    "SIGMOID",
    "HYPERBOLIC_TANGENT",
    "RELU",
    "get_activation",
    "names",
]
