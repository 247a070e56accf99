"""Config-driven training runs for neuralnetlib.

A config is a nested mapping with ``data``, ``model`` and ``train``
sections::

    {
        "data": {"examples": [[[0, 0], [0]], ...]} | {"path": "examples.txt"},
        "model": {"inputs": 2, "outputs": 1, "hidden": [3], "activation": "tanh",
                  "output_activation": "sigmoid", "initializer": "xavier_normal"},
        "train": {"mode": "retrain", "learning_rate": 0.2, "momentum": 0.1,
                  "adaptive_learning_rate": False, "tolerance": 0.0,
                  "max_iterations": 10000, "seed": 7, "run_dir": "runs/xor"},
    }

Inline examples are ``[inputs, outputs]`` or ``[inputs, outputs, reward]``.
"""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

import numpy as np
import structlog

from .. import serialization
from ..core.activations import get_activation
from ..core.builder import build
from ..core.initializers import get_initializer
from ..core.network import NeuralNetwork
from ..core.types import RunResult, TrainingData
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .backprop import Backpropagation
from .trainer import Trainer, max_output_error

logger = structlog.get_logger(__name__)

_REQUIRED_SECTIONS = {"data", "model", "train"}
_MODES = {"retrain", "train"}


def _truth_table(fn) -> List[List[List[float]]]:
    return [[[a, b], [float(fn(a, b))]] for a in (0.0, 1.0) for b in (0.0, 1.0)]


def _gate_preset(fn, hidden: List[int], run_dir: str) -> Mapping[str, object]:
    return {
        "data": {"examples": _truth_table(fn)},
        "model": {
            "inputs": 2,
            "outputs": 1,
            "hidden": hidden,
            "activation": "tanh",
            "output_activation": "sigmoid",
            "initializer": "xavier_normal",
        },
        "train": {
            "mode": "retrain",
            "learning_rate": 0.2,
            "momentum": 0.1,
            "adaptive_learning_rate": False,
            "tolerance": 0.0,
            "max_iterations": 10000,
            "seed": 7,
            "run_dir": run_dir,
            "enable_plots": False,
        },
    }


_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": _gate_preset(lambda a, b: int(a) ^ int(b), [3], "runs/xor"),
    "and": _gate_preset(lambda a, b: int(a) & int(b), [], "runs/and"),
    "or": _gate_preset(lambda a, b: int(a) | int(b), [], "runs/or"),
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def read_config(path: str | Path) -> Mapping[str, object]:
    """Load a JSON or YAML config file."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build, train and persist a network as described by ``config``."""

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    mode = str(train_cfg.get("mode", "retrain"))
    if mode not in _MODES:
        raise ValueError(f"train.mode must be one of {sorted(_MODES)}, got {mode!r}")
    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    tolerance = float(train_cfg.get("tolerance", 0.0))
    max_iterations = int(train_cfg.get("max_iterations", 1000))

    examples, provenance = _load_examples(data_cfg)
    network = _build_network(model_cfg, seed)
    algorithm = Backpropagation(
        learning_rate=float(train_cfg.get("learning_rate", 0.1)),
        momentum=float(train_cfg.get("momentum", 0.0)),
        use_adaptive_learning_rate=bool(train_cfg.get("adaptive_learning_rate", False)),
    )

    run_dir = _resolve_run_dir(train_cfg)
    run_dir.mkdir(parents=True, exist_ok=True)
    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(
        run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)), tolerance=tolerance
    )

    trainer: Trainer[int] = Trainer(
        algorithm,
        {index: data for index, data in enumerate(examples)},
        callbacks=[jsonl, csv_sink, plots],
    )

    if mode == "retrain":
        converged = trainer.retrain(network, tolerance, max_iterations)
        iterations = trainer.last_result.iterations if trainer.last_result else 0
    else:
        converged, iterations = _train_each(trainer, network, tolerance, max_iterations)

    evaluation = _evaluate(network, examples)
    plot_path = plots.close()

    network_path = serialization.save_network(network, run_dir / "network.txt")
    checkpoint_path = serialization.save_checkpoint(network, run_dir / "checkpoint.npz")
    manifest_path = write_manifest(
        run_dir / "manifest.json",
        config=json.loads(json.dumps(config)),
        layer_sizes=network.layer_sizes,
        parameter_count=network.parameter_count(),
        data_provenance=provenance,
    )
    summary_path = write_summary(
        jsonl.path,
        run_dir / "summary.json",
        tail=int(train_cfg.get("summary_tail", 32)),
        tolerance=tolerance,
    )
    (run_dir / "evaluation.json").write_text(json.dumps(evaluation, indent=2))

    logger.info(
        "pipeline_completed",
        run_dir=str(run_dir),
        converged=converged,
        iterations=iterations,
        max_error=evaluation["max_error"],
    )
    extras: Dict[str, object] = {
        "checkpoint": checkpoint_path,
        "evaluation": evaluation,
    }
    if plot_path:
        extras["plot"] = plot_path
    return RunResult(
        iterations=iterations,
        converged=converged,
        metrics_path=str(jsonl.path),
        manifest_path=manifest_path,
        summary_path=summary_path,
        network_path=network_path,
        extras=extras,
    )


# ----------------------------------------------------------------------
# Internal helpers


def _load_examples(data_cfg: Mapping[str, object]) -> Tuple[List[TrainingData], Dict[str, object]]:
    if "path" in data_cfg:
        path = Path(str(data_cfg["path"]))
        examples = serialization.read_training_data(path)
        provenance: Dict[str, object] = {"source": "file", "path": str(path)}
    elif "examples" in data_cfg:
        examples = [_parse_example(item) for item in data_cfg["examples"]]  # type: ignore[union-attr]
        provenance = {"source": "inline"}
    else:
        raise KeyError("data section requires either `examples` or `path`")
    if not examples:
        raise ValueError("No training examples configured")
    provenance["examples"] = len(examples)
    return examples, provenance


def _parse_example(item: object) -> TrainingData:
    if not isinstance(item, (list, tuple)) or len(item) not in {2, 3}:
        raise ValueError(f"Examples must be [inputs, outputs] or [inputs, outputs, reward]: {item!r}")
    reward = float(item[2]) if len(item) == 3 and item[2] is not None else None
    return TrainingData(item[0], item[1], reward=reward)


def _build_network(model_cfg: Mapping[str, object], seed: int | None) -> NeuralNetwork:
    return build(
        int(model_cfg["inputs"]),  # type: ignore[arg-type]
        int(model_cfg["outputs"]),  # type: ignore[arg-type]
        [int(h) for h in model_cfg.get("hidden", [])],  # type: ignore[union-attr]
        activation_function=get_activation(str(model_cfg.get("activation", "tanh"))),
        output_activation_function=get_activation(
            str(model_cfg.get("output_activation", "sigmoid"))
        ),
        weight_initialization_strategy=get_initializer(
            str(model_cfg.get("initializer", "xavier_normal")), seed=seed
        ),
    )


def _train_each(
    trainer: Trainer[int], network: NeuralNetwork, tolerance: float, max_iterations: int
) -> Tuple[bool, int]:
    converged = True
    total = 0
    for position, data in enumerate(trainer.training_data, start=1):
        ok = trainer.train(network, tolerance, max_iterations, data)
        result = trainer.last_result
        steps = result.iterations if result else 0
        error = result.max_error if result else float("nan")
        total += steps
        trainer.emit_epoch(position, {"max_error": error, "iterations": float(steps)})
        converged = converged and ok
    return converged, total


def _evaluate(network: NeuralNetwork, examples: List[TrainingData]) -> Dict[str, object]:
    errors: List[float] = []
    predictions: List[List[float]] = []
    rounded_hits = 0
    for data in examples:
        outputs = network.predict(data.inputs)
        predictions.append([float(v) for v in outputs])
        errors.append(max_output_error(network, data))
        if np.array_equal(np.round(outputs), np.round(np.asarray(data.outputs))):
            rounded_hits += 1
    return {
        "max_error": float(max(errors)),
        "mean_error": float(np.mean(errors)),
        "rounded_accuracy": rounded_hits / len(examples),
        "predictions": predictions,
    }


def _resolve_run_dir(train_cfg: Mapping[str, object]) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    return Path("runs") / time.strftime("%Y%m%d-%H%M%S")


__all__ = [
    "presets",
    "load_preset",
    "read_config",
    "merge_config",
    "run_pipeline",
]
