"""Arena-backed feed-forward network.

Neurons and connections live in two flat lists and refer to each other by
index. A neuron's ``inputs`` list is positional: ``inputs[i]`` is the
connection whose source is the neuron at position ``i`` of the preceding
layer. Backpropagation and the serialization layer both rely on that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Mapping, Optional, Sequence

import numpy as np

from ..errors import ShapeMismatch
from .activations import ActivationFunction
from .types import Array, StateDict

INITIAL_BIAS = 0.01


@dataclass
class Connection:
    """Directed, weighted edge between two neurons of adjacent layers."""

    input_node: int
    output_node: int
    weight: float
    previous_weight_delta: float = 0.0


@dataclass
class Neuron:
    """A single unit: bias, last activation, gradient and connection indices."""

    activation_function: ActivationFunction
    bias: float = INITIAL_BIAS
    previous_bias_delta: float = 0.0
    value: float = 0.0
    gradient: float = 0.0
    inputs: Optional[List[int]] = None
    outputs: Optional[List[int]] = None

    def derivative(self) -> float:
        return self.activation_function.derivative(self.value)


class NeuralNetwork:
    """Fully-connected feed-forward network with a fixed topology.

    Instances are produced by :func:`neuralnetlib.core.builder.build`. Only
    weights, biases, their previous deltas, values and gradients change after
    construction. A network is not safe for concurrent mutation.
    """

    def __init__(
        self,
        neurons: List[Neuron],
        connections: List[Connection],
        inputs: Sequence[int],
        hidden_layers: Sequence[Sequence[int]],
        outputs: Sequence[int],
    ) -> None:
        self.neurons = neurons
        self.connections = connections
        self.inputs = list(inputs)
        self.hidden_layers = [list(layer) for layer in hidden_layers]
        self.outputs = list(outputs)

    # ------------------------------------------------------------------
    # Arena access

    def neuron(self, index: int) -> Neuron:
        return self.neurons[index]

    def connection(self, index: int) -> Connection:
        return self.connections[index]

    def incoming(self, index: int) -> List[Connection]:
        """Incoming connections of neuron ``index`` in source-position order."""

        indices = self.neurons[index].inputs or []
        return [self.connections[c] for c in indices]

    def outgoing(self, index: int) -> List[Connection]:
        """Outgoing connections of neuron ``index`` in target-position order."""

        indices = self.neurons[index].outputs or []
        return [self.connections[c] for c in indices]

    @property
    def input_neurons(self) -> List[Neuron]:
        return [self.neurons[i] for i in self.inputs]

    @property
    def output_neurons(self) -> List[Neuron]:
        return [self.neurons[i] for i in self.outputs]

    @property
    def hidden_neurons(self) -> List[List[Neuron]]:
        return [[self.neurons[i] for i in layer] for layer in self.hidden_layers]

    @property
    def layer_sizes(self) -> List[int]:
        sizes = [len(self.inputs)]
        sizes.extend(len(layer) for layer in self.hidden_layers)
        sizes.append(len(self.outputs))
        return sizes

    # ------------------------------------------------------------------
    # Forward propagation

    def fire(self, input_values: Sequence[float]) -> None:
        """Load ``input_values`` into the input layer and propagate forward.

        Input neurons pass their value through unchanged; their activation
        function is never applied.
        """

        if len(input_values) != len(self.inputs):
            raise ShapeMismatch("input", len(self.inputs), len(input_values))
        for index, value in zip(self.inputs, input_values):
            self.neurons[index].value = float(value)
        self.feed_forward()

    def feed_forward(self) -> None:
        for layer in self.hidden_layers:
            for index in layer:
                self._activate(self.neurons[index])
        for index in self.outputs:
            self._activate(self.neurons[index])

    def _activate(self, neuron: Neuron) -> None:
        if neuron.inputs is None:
            return
        total = neuron.bias
        for c in neuron.inputs:
            connection = self.connections[c]
            total += connection.weight * self.neurons[connection.input_node].value
        neuron.value = neuron.activation_function.invoke(total)

    def output_values(self) -> Array:
        return np.array([self.neurons[i].value for i in self.outputs], dtype=np.float64)

    def predict(self, input_values: Sequence[float]) -> Array:
        self.fire(input_values)
        return self.output_values()

    # ------------------------------------------------------------------
    # Stable traversal

    def all_neurons(self) -> Iterator[Neuron]:
        """Inputs, then hidden layers nearest-input first, then outputs."""

        for index in self.inputs:
            yield self.neurons[index]
        for layer in self.hidden_layers:
            for index in layer:
                yield self.neurons[index]
        for index in self.outputs:
            yield self.neurons[index]

    def all_connections(self) -> Iterator[Connection]:
        """Outgoing connections of the input layer, then of each hidden layer."""

        for index in self.inputs:
            yield from self.outgoing(index)
        for layer in self.hidden_layers:
            for index in layer:
                yield from self.outgoing(index)

    def state_dict(self) -> StateDict:
        neurons = list(self.all_neurons())
        connections = list(self.all_connections())
        return {
            "biases": np.array([n.bias for n in neurons], dtype=np.float64),
            "bias_deltas": np.array([n.previous_bias_delta for n in neurons], dtype=np.float64),
            "weights": np.array([c.weight for c in connections], dtype=np.float64),
            "weight_deltas": np.array(
                [c.previous_weight_delta for c in connections], dtype=np.float64
            ),
        }

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        neurons = list(self.all_neurons())
        connections = list(self.all_connections())
        expected = {
            "biases": len(neurons),
            "bias_deltas": len(neurons),
            "weights": len(connections),
            "weight_deltas": len(connections),
        }
        for key, size in expected.items():
            if key not in state:
                raise KeyError(f"Missing {key} in state dict")
            if len(state[key]) != size:
                raise ShapeMismatch(key, size, len(state[key]))
        for neuron, bias, delta in zip(neurons, state["biases"], state["bias_deltas"]):
            neuron.bias = float(bias)
            neuron.previous_bias_delta = float(delta)
        for connection, weight, delta in zip(
            connections, state["weights"], state["weight_deltas"]
        ):
            connection.weight = float(weight)
            connection.previous_weight_delta = float(delta)

    def parameter_count(self) -> int:
        return len(self.connections) + len(self.neurons) - len(self.inputs)

    def __repr__(self) -> str:
        return f"NeuralNetwork(layer_sizes={self.layer_sizes})"


__all__ = ["INITIAL_BIAS", "Connection", "Neuron", "NeuralNetwork"]
