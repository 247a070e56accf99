import pytest

from neuralnetlib.core.activations import HYPERBOLIC_TANGENT, RELU, SIGMOID
from neuralnetlib.core.builder import build
from neuralnetlib.core.network import INITIAL_BIAS


class _RecordingStrategy:
    def __init__(self):
        self.calls = []

    def initial_weight(self, fan_in, fan_out):
        self.calls.append((fan_in, fan_out))
        return 0.1 * len(self.calls)


def test_empty_hidden_layers_wire_inputs_to_outputs():
    network = build(3, 2, [])
    assert network.hidden_layers == []
    for index in network.inputs:
        neuron = network.neuron(index)
        assert neuron.inputs is None
        assert len(neuron.outputs) == 2
    for index in network.outputs:
        neuron = network.neuron(index)
        assert neuron.outputs is None
        assert len(neuron.inputs) == 3
        for position, connection in enumerate(network.incoming(index)):
            assert connection.input_node == network.inputs[position]
            assert connection.output_node == index


def test_connections_are_indexed_from_both_ends():
    network = build(2, 2, [3, 4])
    layers = [network.inputs, *network.hidden_layers, network.outputs]
    for depth, layer in enumerate(layers):
        for index in layer:
            neuron = network.neuron(index)
            if depth > 0:
                assert len(neuron.inputs) == len(layers[depth - 1])
                for position, connection in enumerate(network.incoming(index)):
                    assert connection.input_node == layers[depth - 1][position]
            if depth < len(layers) - 1:
                assert len(neuron.outputs) == len(layers[depth + 1])
                for position, connection in enumerate(network.outgoing(index)):
                    assert connection.output_node == layers[depth + 1][position]
                    assert network.connection(neuron.outputs[position]) is connection


def test_defaults_use_tanh_hidden_and_sigmoid_output():
    network = build(2, 1, [2])
    assert all(n.activation_function is HYPERBOLIC_TANGENT for n in network.input_neurons)
    assert all(n.activation_function is HYPERBOLIC_TANGENT for n in network.hidden_neurons[0])
    assert network.output_neurons[0].activation_function is SIGMOID
    assert all(n.bias == INITIAL_BIAS for n in network.all_neurons())
    assert all(c.previous_weight_delta == 0.0 for c in network.all_connections())


def test_custom_activation_functions():
    network = build(2, 1, [2], activation_function=RELU, output_activation_function=RELU)
    assert all(n.activation_function is RELU for n in network.all_neurons())


def test_strategy_receives_fan_in_and_fan_out():
    strategy = _RecordingStrategy()
    network = build(2, 1, [3], weight_initialization_strategy=strategy)
    assert strategy.calls == [(2, 3)] * 6 + [(3, 1)] * 3
    assert sorted(c.weight for c in network.connections) == pytest.approx(
        [0.1 * (i + 1) for i in range(9)]
    )


@pytest.mark.parametrize("args", [(0, 1, []), (2, 0, []), (2, 1, [3, 0])])
def test_non_positive_layer_sizes_are_rejected(args):
    with pytest.raises(ValueError, match="positive"):
        build(*args)
