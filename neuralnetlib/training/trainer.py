"""Convergence-driven training loops for neuralnetlib."""

from __future__ import annotations

from typing import (
    Callable,
    Generic,
    Hashable,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    TypeVar,
)

import structlog

from ..core.network import NeuralNetwork
from ..core.types import TrainingData, TrainingResult, TrainingStatus
from .backprop import TrainingAlgorithm

K = TypeVar("K", bound=Hashable)

logger = structlog.get_logger(__name__)


def max_output_error(network: NeuralNetwork, data: TrainingData) -> float:
    """Largest absolute difference between the network outputs and ``data.outputs``."""

    return max(
        abs(network.neurons[index].value - target)
        for index, target in zip(network.outputs, data.outputs)
    )


class Trainer(Generic[K]):
    """Drive a training algorithm until an example set is learned.

    Examples are kept in a dict keyed by a caller-chosen identifier; the
    whole-set :meth:`retrain` visits them in insertion order. A dict passed
    as ``training_data`` is used directly, so later changes made by the
    caller (or through :meth:`add_or_update_data`) are seen by both sides.
    Callbacks may implement ``on_step(iteration, metrics)`` and/or
    ``on_epoch(sweep, metrics)``.

    ``last_result`` holds a ``TRAINING`` status while a loop is running,
    updated after every step, and the terminal status once it returns.
    """

    def __init__(
        self,
        algorithm: TrainingAlgorithm,
        training_data: Optional[MutableMapping[K, TrainingData]] = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.algorithm = algorithm
        self._training_data: MutableMapping[K, TrainingData] = (
            training_data if training_data is not None else {}
        )
        self.callbacks = list(callbacks or [])
        self.last_result: Optional[TrainingResult] = None

    @property
    def training_data(self) -> List[TrainingData]:
        return list(self._training_data.values())

    def add_or_update_data(self, key: K, data: TrainingData) -> None:
        self._training_data[key] = data

    def __len__(self) -> int:
        return len(self._training_data)

    # ------------------------------------------------------------------
    # Convergence modes

    def train(
        self,
        network: NeuralNetwork,
        tolerance: float,
        max_iterations: int,
        data: TrainingData,
    ) -> bool:
        """Train on ``data`` until its worst output error is within ``tolerance``."""

        error = float("nan")
        for iteration in range(1, max_iterations + 1):
            error = self._step(network, data, iteration)
            if error <= tolerance:
                return self._finish(TrainingStatus.CONVERGED, iteration, error, mode="train")
        return self._finish(TrainingStatus.EXHAUSTED, max_iterations, error, mode="train")

    def retrain(self, network: NeuralNetwork, tolerance: float, max_iterations: int) -> bool:
        """Sweep all stored examples until the worst error of a sweep is within ``tolerance``.

        ``max_iterations`` bounds the total number of training steps across
        all sweeps, so the last sweep may stop part way through.
        """

        if not self._training_data:
            logger.warning("retrain_without_data")
            return self._finish(TrainingStatus.CONVERGED, 0, 0.0, mode="retrain")

        iterations = 0
        sweep = 0
        worst = float("nan")
        while iterations < max_iterations:
            sweep += 1
            worst = 0.0
            complete = True
            for data in self._training_data.values():
                if iterations >= max_iterations:
                    complete = False
                    break
                iterations += 1
                worst = max(worst, self._step(network, data, iterations))
            self.emit_epoch(sweep, {"max_error": worst, "iterations": float(iterations)})
            logger.debug("retrain_sweep", sweep=sweep, max_error=worst, iterations=iterations)
            if complete and worst <= tolerance:
                return self._finish(TrainingStatus.CONVERGED, iterations, worst, mode="retrain")
        return self._finish(TrainingStatus.EXHAUSTED, iterations, worst, mode="retrain")

    def train_until(
        self,
        network: NeuralNetwork,
        max_iterations: int,
        data: TrainingData,
        predicate: Callable[[], bool],
    ) -> bool:
        """Train on ``data`` until ``predicate()`` holds.

        The predicate is evaluated after every step, never before the first.
        """

        error = float("nan")
        for iteration in range(1, max_iterations + 1):
            error = self._step(network, data, iteration)
            if predicate():
                return self._finish(TrainingStatus.CONVERGED, iteration, error, mode="train_until")
        return self._finish(TrainingStatus.EXHAUSTED, max_iterations, error, mode="train_until")

    # ------------------------------------------------------------------
    # Internal helpers

    def _step(self, network: NeuralNetwork, data: TrainingData, iteration: int) -> float:
        self.algorithm.train(network, data.inputs, data.outputs, reward=data.effective_reward)
        error = max_output_error(network, data)
        self.last_result = TrainingResult(
            status=TrainingStatus.TRAINING, iterations=iteration, max_error=error
        )
        self._emit_step(iteration, {"max_error": error})
        return error

    def _finish(
        self, status: TrainingStatus, iterations: int, max_error: float, *, mode: str
    ) -> bool:
        self.last_result = TrainingResult(status=status, iterations=iterations, max_error=max_error)
        event = "training_converged" if status is TrainingStatus.CONVERGED else "training_exhausted"
        logger.info(event, mode=mode, iterations=iterations, max_error=max_error)
        return self.last_result.converged

    def _emit_step(self, iteration: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(iteration, metrics)  # type: ignore[attr-defined]

    def emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        """Forward ``metrics`` to every callback that implements ``on_epoch``."""

        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]


__all__ = ["Trainer", "max_output_error"]
