"""Weight initialisation strategies for neuralnetlib."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Protocol

import numpy as np


class WeightInitializationStrategy(Protocol):
    """Protocol implemented by initial-weight generators."""

    def initial_weight(self, fan_in: int, fan_out: int) -> float:
        """Return a weight for a connection between layers of the given sizes."""


# Shared by the default instances; seed a strategy explicitly for reproducibility.
_SHARED_RNG = np.random.default_rng()


@dataclass
class RandomWeightInitialization:
    """Narrow uniform weights in ``[0.49, 0.51)``, independent of layer sizes."""

    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @classmethod
    def from_seed(cls, seed: int) -> "RandomWeightInitialization":
        return cls(np.random.default_rng(seed))

    def initial_weight(self, fan_in: int, fan_out: int) -> float:
        return 0.49 + float(self.rng.random()) * 0.02


@dataclass
class XavierNormalInitialization:
    """Glorot normal weights with std-dev ``sqrt(2 / (fan_in + fan_out))``.

    Samples are drawn with the Box-Muller transform from two uniforms on
    ``(0, 1]`` so ``log`` never sees zero.
    """

    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @classmethod
    def from_seed(cls, seed: int) -> "XavierNormalInitialization":
        return cls(np.random.default_rng(seed))

    def initial_weight(self, fan_in: int, fan_out: int) -> float:
        std_dev = math.sqrt(2.0 / (fan_in + fan_out))
        u1 = 1.0 - float(self.rng.random())
        u2 = 1.0 - float(self.rng.random())
        standard_normal = math.sqrt(-2.0 * math.log(u1)) * math.sin(2.0 * math.pi * u2)
        return standard_normal * std_dev


@dataclass
class XavierUniformInitialization:
    """Glorot uniform weights in ``[-limit, limit)``, ``limit = sqrt(6 / (fan_in + fan_out))``."""

    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @classmethod
    def from_seed(cls, seed: int) -> "XavierUniformInitialization":
        return cls(np.random.default_rng(seed))

    def initial_weight(self, fan_in: int, fan_out: int) -> float:
        limit = math.sqrt(6.0 / (fan_in + fan_out))
        return float(self.rng.random()) * 2.0 * limit - limit


RANDOM = RandomWeightInitialization(_SHARED_RNG)
XAVIER_NORMAL = XavierNormalInitialization(_SHARED_RNG)
XAVIER_UNIFORM = XavierUniformInitialization(_SHARED_RNG)

_FACTORIES: Dict[str, Callable[[np.random.Generator], WeightInitializationStrategy]] = {
    "random": RandomWeightInitialization,
    "xavier_normal": XavierNormalInitialization,
    "xavier_uniform": XavierUniformInitialization,
}

_SHARED: Dict[str, WeightInitializationStrategy] = {
    "random": RANDOM,
    "xavier_normal": XAVIER_NORMAL,
    "xavier_uniform": XAVIER_UNIFORM,
}


def names() -> Iterable[str]:
    return sorted(_FACTORIES)


def get_initializer(name: str, seed: Optional[int] = None) -> WeightInitializationStrategy:
    """Resolve ``name`` to a strategy, seeded when ``seed`` is given.

    Without a seed the process-wide shared instance is returned.
    """

    key = name.lower()
    if key not in _FACTORIES:
        available = ", ".join(sorted(_FACTORIES))
        raise KeyError(f"Unknown initializer {name!r}. Available initializers: {available}")
    if seed is None:
        return _SHARED[key]
    return _FACTORIES[key](np.random.default_rng(seed))


__all__ = [
    "WeightInitializationStrategy",
    "RandomWeightInitialization",
    "XavierNormalInitialization",
    "XavierUniformInitialization",
    "RANDOM",
    "XAVIER_NORMAL",
    "XAVIER_UNIFORM",
    "get_initializer",
    "names",
]
