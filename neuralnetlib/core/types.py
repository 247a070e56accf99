"""Core typing contracts for neuralnetlib."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import numpy as np

Array = np.ndarray

StateDict = Dict[str, Array]

DEFAULT_REWARD = 1.0


@dataclass
class TrainingData:
    """A single labelled example.

    ``inputs`` and ``outputs`` are normalised to float tuples; ``reward`` stays
    assignable so callers can re-weight an example between training runs.
    """

    inputs: Sequence[float]
    outputs: Sequence[float]
    reward: Optional[float] = None

    def __post_init__(self) -> None:
        self.inputs = tuple(float(v) for v in self.inputs)
        self.outputs = tuple(float(v) for v in self.outputs)

    @property
    def effective_reward(self) -> float:
        return DEFAULT_REWARD if self.reward is None else float(self.reward)


class TrainingStatus(enum.Enum):
    """States of a convergence loop.

    ``TRAINING`` is held by a trainer between steps; a finished loop ends in
    ``CONVERGED`` or ``EXHAUSTED``.
    """

    TRAINING = "training"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class TrainingResult:
    """Outcome of the most recent :class:`~neuralnetlib.training.trainer.Trainer` call."""

    status: TrainingStatus
    iterations: int
    max_error: float = float("nan")

    @property
    def converged(self) -> bool:
        return self.status is TrainingStatus.CONVERGED


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`neuralnetlib.training.pipelines.run_pipeline`."""

    iterations: int
    converged: bool
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    network_path: str = ""
    extras: Dict[str, object] = field(default_factory=dict)


__all__ = [
    "Array",
    "StateDict",
    "DEFAULT_REWARD",
    "TrainingData",
    "TrainingStatus",
    "TrainingResult",
    "RunResult",
]
