"""Command line interface for neuralnetlib."""
