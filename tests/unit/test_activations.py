import math

import numpy as np
import pytest

from neuralnetlib.core.activations import (
    HYPERBOLIC_TANGENT,
    RELU,
    SIGMOID,
    get_activation,
    names,
)


@pytest.mark.parametrize("x", [-3.0, -0.5, 0.0, 0.25, 2.0])
def test_derivatives_are_expressed_in_terms_of_the_output(x):
    sig = SIGMOID.invoke(x)
    assert SIGMOID.derivative(sig) == pytest.approx(math.exp(-x) / (1 + math.exp(-x)) ** 2)

    tanh = HYPERBOLIC_TANGENT.invoke(x)
    assert HYPERBOLIC_TANGENT.derivative(tanh) == pytest.approx(1.0 / math.cosh(x) ** 2)

    relu = RELU.invoke(x)
    assert RELU.derivative(relu) == (1.0 if x > 0 else 0.0)


def test_known_values():
    assert SIGMOID.invoke(0.0) == 0.5
    assert HYPERBOLIC_TANGENT.invoke(0.0) == 0.0
    assert RELU.invoke(-2.0) == 0.0
    assert RELU.invoke(1.5) == 1.5
    assert SIGMOID.derivative(0.5) == 0.25
    assert HYPERBOLIC_TANGENT.derivative(0.0) == 1.0


def test_extreme_inputs_are_not_clamped():
    with np.errstate(over="ignore"):
        assert SIGMOID.invoke(-1000.0) == 0.0
    assert SIGMOID.invoke(1000.0) == 1.0
    assert math.isnan(SIGMOID.invoke(float("nan")))
    assert math.isnan(RELU.invoke(float("nan")))
    assert math.isnan(HYPERBOLIC_TANGENT.invoke(float("nan")))


def test_registry_resolves_shared_instances():
    assert get_activation("sigmoid") is SIGMOID
    assert get_activation("TANH") is HYPERBOLIC_TANGENT
    assert get_activation("relu") is RELU
    assert list(names()) == ["relu", "sigmoid", "tanh"]
    with pytest.raises(KeyError, match="Available activations"):
        get_activation("softplus")
