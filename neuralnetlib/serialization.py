"""Text and numpy persistence for networks and training examples.

Network text layout, one comma-delimited line each::

    input_count,output_count
    hidden sizes (blank line when there are none)
    biases                 (NeuralNetwork.all_neurons order)
    previous bias deltas   (NeuralNetwork.all_neurons order)
    weights                (NeuralNetwork.all_connections order)
    previous weight deltas (NeuralNetwork.all_connections order)

Training examples are written one per line as ``in,...;out,...[;reward]``.
Activation functions are not persisted; decoding rebuilds the network with
the builder defaults unless other functions are supplied.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Sequence

import numpy as np
import structlog

from .core.activations import ActivationFunction
from .core.builder import build
from .core.network import NeuralNetwork
from .core.types import TrainingData
from .errors import InvalidDataError, ShapeMismatch

logger = structlog.get_logger(__name__)

_DELIMITER = ","
_SECTION_DELIMITER = ";"
_INVALID_HEADER = "Invalid header line. Expected format: inputCount,outputCount"


def _join(values: Iterable[float]) -> str:
    return _DELIMITER.join(repr(float(v)) for v in values)


# ----------------------------------------------------------------------
# Networks


def dump_network(network: NeuralNetwork, stream: IO[str]) -> None:
    state = network.state_dict()
    stream.write(f"{len(network.inputs)}{_DELIMITER}{len(network.outputs)}\n")
    stream.write(_DELIMITER.join(str(len(layer)) for layer in network.hidden_layers) + "\n")
    for key in ("biases", "bias_deltas", "weights", "weight_deltas"):
        stream.write(_join(state[key]) + "\n")


def dumps_network(network: NeuralNetwork) -> str:
    buffer = io.StringIO()
    dump_network(network, buffer)
    return buffer.getvalue()


def save_network(network: NeuralNetwork, path: str | Path) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        dump_network(network, handle)
    return str(path)


def load_network(
    stream: IO[str],
    activation_function: Optional[ActivationFunction] = None,
    output_activation_function: Optional[ActivationFunction] = None,
) -> NeuralNetwork:
    header = stream.readline().strip().split(_DELIMITER)
    if len(header) < 2:
        raise InvalidDataError(_INVALID_HEADER)
    input_count = _read_int(header[0], "inputCount")
    output_count = _read_int(header[1], "outputCount")
    hidden = [_read_int(v, "hiddenLayerCount") for v in _split(stream.readline())]

    network = build(
        input_count,
        output_count,
        hidden,
        activation_function=activation_function,
        output_activation_function=output_activation_function,
    )
    state = {
        key: np.array([_read_float(v, key) for v in _split(stream.readline())], dtype=np.float64)
        for key in ("biases", "bias_deltas", "weights", "weight_deltas")
    }
    try:
        network.load_state_dict(state)
    except ShapeMismatch as exc:
        raise InvalidDataError(str(exc)) from exc
    return network


def loads_network(text: str, **kwargs) -> NeuralNetwork:
    return load_network(io.StringIO(text), **kwargs)


def read_network(path: str | Path, **kwargs) -> NeuralNetwork:
    with Path(path).open("r", encoding="utf-8") as handle:
        return load_network(handle, **kwargs)


# ----------------------------------------------------------------------
# Training data


def format_training_data(data: TrainingData) -> str:
    line = _join(data.inputs) + _SECTION_DELIMITER + _join(data.outputs)
    if data.reward is not None:
        line += _SECTION_DELIMITER + repr(float(data.reward))
    return line


def dump_training_data(examples: Iterable[TrainingData], stream: IO[str]) -> None:
    for data in examples:
        stream.write(format_training_data(data) + "\n")


def save_training_data(examples: Iterable[TrainingData], path: str | Path) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        dump_training_data(examples, handle)
    return str(path)


def iter_training_data(stream: IO[str]) -> Iterator[TrainingData]:
    """Yield examples from ``stream``; blank and single-section lines are skipped."""

    for line in stream:
        line = line.strip()
        if not line:
            continue
        sections = line.split(_SECTION_DELIMITER)
        if len(sections) < 2:
            continue
        inputs = [_read_float(v, "input") for v in sections[0].split(_DELIMITER)]
        outputs = [_read_float(v, "output") for v in sections[1].split(_DELIMITER)]
        reward = _read_float(sections[2], "reward") if len(sections) > 2 else None
        yield TrainingData(inputs, outputs, reward=reward)


def loads_training_data(text: str) -> List[TrainingData]:
    return list(iter_training_data(io.StringIO(text)))


def read_training_data(path: str | Path) -> List[TrainingData]:
    """Read examples from ``path``; a missing file reads as no examples."""

    path = Path(path)
    if not path.exists():
        logger.warning("training_data_missing", path=str(path))
        return []
    with path.open("r", encoding="utf-8") as handle:
        return list(iter_training_data(handle))


# ----------------------------------------------------------------------
# Numpy checkpoints


def save_checkpoint(network: NeuralNetwork, path: str | Path) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = dict(network.state_dict())
    payload["layer_sizes"] = np.array(network.layer_sizes, dtype=np.int64)
    with path.open("wb") as handle:
        np.savez_compressed(handle, **payload)
    logger.info("checkpoint_saved", path=str(path), layer_sizes=network.layer_sizes)
    return str(path)


def load_checkpoint(
    path: str | Path,
    activation_function: Optional[ActivationFunction] = None,
    output_activation_function: Optional[ActivationFunction] = None,
) -> NeuralNetwork:
    with np.load(Path(path)) as archive:
        sizes = [int(v) for v in archive["layer_sizes"]]
        state = {key: archive[key] for key in ("biases", "bias_deltas", "weights", "weight_deltas")}
    network = build(
        sizes[0],
        sizes[-1],
        sizes[1:-1],
        activation_function=activation_function,
        output_activation_function=output_activation_function,
    )
    network.load_state_dict(state)
    return network


# ----------------------------------------------------------------------
# Helpers


def _split(line: str) -> Sequence[str]:
    line = line.strip()
    if not line:
        return []
    return line.split(_DELIMITER)


def _read_int(value: str, name: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise InvalidDataError(f"Invalid integer value for {name}.") from exc


def _read_float(value: str, name: str) -> float:
    try:
        return float(value.strip())
    except ValueError as exc:
        raise InvalidDataError(f"Invalid double value for {name}.") from exc


__all__ = [
    "dump_network",
    "dumps_network",
    "save_network",
    "load_network",
    "loads_network",
    "read_network",
    "format_training_data",
    "dump_training_data",
    "save_training_data",
    "iter_training_data",
    "loads_training_data",
    "read_training_data",
    "save_checkpoint",
    "load_checkpoint",
]
