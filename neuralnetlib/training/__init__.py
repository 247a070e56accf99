"""Training algorithms, convergence loops and run pipelines."""

from .backprop import Backpropagation, TrainingAlgorithm
from .trainer import Trainer, max_output_error

__all__ = ["Backpropagation", "TrainingAlgorithm", "Trainer", "max_output_error"]
