"""Core network primitives for neuralnetlib."""

from . import activations, builder, initializers, network, types

__all__ = ["activations", "builder", "initializers", "network", "types"]
