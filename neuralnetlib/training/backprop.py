"""Backpropagation with momentum and reward-scaled error."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, Sequence

from ..core.network import Connection, NeuralNetwork, Neuron
from ..core.types import DEFAULT_REWARD
from ..errors import ShapeMismatch


class TrainingAlgorithm(Protocol):
    """Protocol implemented by algorithms the trainer can drive."""

    def train(
        self,
        network: NeuralNetwork,
        inputs: Sequence[float],
        expected_outputs: Sequence[float],
        reward: float = DEFAULT_REWARD,
    ) -> None:
        """Run one forward pass and one parameter update."""


@dataclass
class Backpropagation:
    """Online gradient descent over a single example per call.

    ``reward`` multiplies the output error: ``0`` turns a step into a no-op and
    a negative value reverses the direction of every update. With
    ``use_adaptive_learning_rate`` the step size becomes
    ``learning_rate * (1 + tanh(m))`` where ``m`` is the mean absolute
    output gradient, so larger errors take larger steps but never more than
    twice the configured rate.
    """

    learning_rate: float = 0.1
    momentum: float = 0.0
    use_adaptive_learning_rate: bool = False

    def train(
        self,
        network: NeuralNetwork,
        inputs: Sequence[float],
        expected_outputs: Sequence[float],
        reward: float = DEFAULT_REWARD,
    ) -> None:
        network.fire(inputs)
        self.backpropagate(network, expected_outputs, reward)

    def backpropagate(
        self,
        network: NeuralNetwork,
        expected_outputs: Sequence[float],
        reward: float = DEFAULT_REWARD,
    ) -> None:
        """Update every weight and bias assuming ``network`` was just fired."""

        if len(expected_outputs) != len(network.outputs):
            raise ShapeMismatch("expected output", len(network.outputs), len(expected_outputs))

        self._update_output_gradients(network, expected_outputs, reward)
        self._update_hidden_gradients(network)
        rate = self.effective_learning_rate(network)

        for index in network.inputs:
            for connection in network.outgoing(index):
                self._update_weight(network, connection, rate)
        for layer in network.hidden_layers:
            for index in layer:
                self._update_bias(network.neurons[index], rate)
                for connection in network.outgoing(index):
                    self._update_weight(network, connection, rate)
        for index in network.outputs:
            self._update_bias(network.neurons[index], rate)

    def effective_learning_rate(self, network: NeuralNetwork) -> float:
        """Learning rate for the output gradients currently held by ``network``."""

        if not self.use_adaptive_learning_rate:
            return self.learning_rate
        gradients = [abs(network.neurons[i].gradient) for i in network.outputs]
        magnitude = sum(gradients) / len(gradients)
        return self.learning_rate * (1.0 + math.tanh(magnitude))

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _update_output_gradients(
        network: NeuralNetwork, expected_outputs: Sequence[float], reward: float
    ) -> None:
        for index, target in zip(network.outputs, expected_outputs):
            neuron = network.neurons[index]
            neuron.gradient = neuron.derivative() * (float(target) - neuron.value) * reward

    @staticmethod
    def _update_hidden_gradients(network: NeuralNetwork) -> None:
        # Downstream gradients must be final, so walk the layers output-first.
        for layer in reversed(network.hidden_layers):
            for index in layer:
                neuron = network.neurons[index]
                downstream = sum(
                    network.neurons[c.output_node].gradient * c.weight
                    for c in network.outgoing(index)
                )
                neuron.gradient = neuron.derivative() * downstream

    def _update_weight(self, network: NeuralNetwork, connection: Connection, rate: float) -> None:
        delta = (
            rate
            * network.neurons[connection.output_node].gradient
            * network.neurons[connection.input_node].value
        )
        connection.weight += delta + self.momentum * connection.previous_weight_delta
        connection.previous_weight_delta = delta

    def _update_bias(self, neuron: Neuron, rate: float) -> None:
        delta = rate * neuron.gradient
        neuron.bias += delta + self.momentum * neuron.previous_bias_delta
        neuron.previous_bias_delta = delta


__all__ = ["TrainingAlgorithm", "Backpropagation"]
