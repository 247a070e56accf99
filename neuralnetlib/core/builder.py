"""Network construction."""

from __future__ import annotations

from typing import List, Optional, Sequence

import structlog

from .activations import HYPERBOLIC_TANGENT, SIGMOID, ActivationFunction
from .initializers import XAVIER_NORMAL, WeightInitializationStrategy
from .network import INITIAL_BIAS, Connection, NeuralNetwork, Neuron

logger = structlog.get_logger(__name__)


def build(
    input_count: int,
    output_count: int,
    hidden_layer_counts: Sequence[int] = (),
    activation_function: Optional[ActivationFunction] = None,
    output_activation_function: Optional[ActivationFunction] = None,
    weight_initialization_strategy: Optional[WeightInitializationStrategy] = None,
) -> NeuralNetwork:
    """Build a fully-connected network.

    ``activation_function`` applies to the input and hidden layers (tanh by
    default), ``output_activation_function`` to the output layer (sigmoid by
    default). Weights come from ``weight_initialization_strategy``, which
    defaults to the shared, unseeded Xavier-normal instance. An empty
    ``hidden_layer_counts`` wires inputs straight to outputs.
    """

    counts = [int(input_count), *(int(c) for c in hidden_layer_counts), int(output_count)]
    if any(count <= 0 for count in counts):
        raise ValueError(f"Layer sizes must be positive, got {counts}")

    hidden_fn = activation_function or HYPERBOLIC_TANGENT
    output_fn = output_activation_function or SIGMOID
    strategy = weight_initialization_strategy or XAVIER_NORMAL

    neurons: List[Neuron] = []
    connections: List[Connection] = []

    inputs = _create_layer(neurons, counts[0], hidden_fn)
    previous = inputs
    hidden_layers: List[List[int]] = []
    for count in counts[1:-1]:
        layer = _create_layer(neurons, count, hidden_fn)
        _connect(neurons, connections, previous, layer, strategy)
        hidden_layers.append(layer)
        previous = layer
    outputs = _create_layer(neurons, counts[-1], output_fn)
    _connect(neurons, connections, previous, outputs, strategy)

    network = NeuralNetwork(neurons, connections, inputs, hidden_layers, outputs)
    logger.debug(
        "network_built",
        layer_sizes=network.layer_sizes,
        connections=len(connections),
        activation=hidden_fn.name,
        output_activation=output_fn.name,
    )
    return network


def _create_layer(
    neurons: List[Neuron], count: int, activation_function: ActivationFunction
) -> List[int]:
    start = len(neurons)
    for _ in range(count):
        neurons.append(Neuron(activation_function, bias=INITIAL_BIAS))
    return list(range(start, start + count))


def _connect(
    neurons: List[Neuron],
    connections: List[Connection],
    source_layer: Sequence[int],
    target_layer: Sequence[int],
    strategy: WeightInitializationStrategy,
) -> None:
    fan_in = len(source_layer)
    fan_out = len(target_layer)
    for target in target_layer:
        neurons[target].inputs = [0] * fan_in
    for position, source in enumerate(source_layer):
        outgoing: List[int] = []
        for target in target_layer:
            weight = strategy.initial_weight(fan_in, fan_out)
            connections.append(Connection(source, target, weight))
            index = len(connections) - 1
            outgoing.append(index)
            neurons[target].inputs[position] = index  # type: ignore[index]
        neurons[source].outputs = outgoing


__all__ = ["build"]
