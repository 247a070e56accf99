import json
from pathlib import Path

import pytest
import yaml

from neuralnetlib import serialization
from neuralnetlib.core.types import TrainingData
from neuralnetlib.training import pipelines


def _config(tmp_path, name="run", **train):
    config = pipelines.load_preset("xor")
    config["train"].update({"run_dir": str(tmp_path / name), "max_iterations": 400, "seed": 5})
    config["train"].update(train)
    return config


def test_pipeline_writes_run_artifacts(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path))
    run_dir = tmp_path / "run"
    for name in (
        "metrics.jsonl",
        "metrics.csv",
        "manifest.json",
        "summary.json",
        "network.txt",
        "checkpoint.npz",
        "evaluation.json",
    ):
        assert (run_dir / name).exists(), name

    assert result.iterations == 400 or result.converged
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["network"]["layer_sizes"] == [2, 3, 1]
    assert manifest["network"]["parameters"] == 9 + 3 + 1
    assert manifest["data"] == {"source": "inline", "examples": 4}

    evaluation = result.extras["evaluation"]
    assert len(evaluation["predictions"]) == 4
    assert 0.0 <= evaluation["rounded_accuracy"] <= 1.0

    restored = serialization.read_network(result.network_path)
    assert restored.layer_sizes == [2, 3, 1]


def test_pipeline_is_deterministic_for_a_seed(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path, "run_a"))
    second = pipelines.run_pipeline(_config(tmp_path, "run_b"))

    assert Path(first.metrics_path).read_bytes() == Path(second.metrics_path).read_bytes()
    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()
    assert Path(first.network_path).read_bytes() == Path(second.network_path).read_bytes()


def test_train_mode_records_one_epoch_per_example(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path, mode="train", max_iterations=25))
    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [record["epoch"] for record in records] == [1, 2, 3, 4]
    assert all(record["iterations"] <= 25 for record in records)


def test_pipeline_reads_examples_from_file(tmp_path):
    data_path = tmp_path / "and.txt"
    serialization.save_training_data(
        [TrainingData([a, b], [a * b]) for a in (0, 1) for b in (0, 1)], data_path
    )
    config = pipelines.load_preset("and")
    config["data"] = {"path": str(data_path)}
    config["train"].update({"run_dir": str(tmp_path / "run"), "max_iterations": 50})

    result = pipelines.run_pipeline(config)
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["data"]["source"] == "file"
    assert manifest["network"]["layer_sizes"] == [2, 1]


def test_missing_data_file_is_rejected(tmp_path):
    config = _config(tmp_path)
    config["data"] = {"path": str(tmp_path / "absent.txt")}
    with pytest.raises(ValueError, match="No training examples"):
        pipelines.run_pipeline(config)


def test_yaml_override_merges_into_preset(tmp_path):
    path = tmp_path / "override.yaml"
    path.write_text(yaml.safe_dump({"model": {"hidden": [5]}, "train": {"momentum": 0.0}}))
    merged = pipelines.merge_config(pipelines.load_preset("xor"), pipelines.read_config(path))
    assert merged["model"]["hidden"] == [5]
    assert merged["model"]["activation"] == "tanh"
    assert merged["train"]["momentum"] == 0.0
    assert merged["train"]["learning_rate"] == 0.2


def test_presets_are_isolated_copies():
    first = pipelines.load_preset("xor")
    first["train"]["seed"] = 99
    assert pipelines.load_preset("xor")["train"]["seed"] == 7
    assert sorted(pipelines.presets()) == ["and", "or", "xor"]
    with pytest.raises(KeyError, match="Available presets"):
        pipelines.load_preset("nand")


def test_invalid_configs_are_rejected(tmp_path):
    config = _config(tmp_path)
    del config["model"]
    with pytest.raises(KeyError, match="model"):
        pipelines.run_pipeline(config)

    config = _config(tmp_path, mode="online")
    with pytest.raises(ValueError, match="train.mode"):
        pipelines.run_pipeline(config)

    toml = tmp_path / "config.toml"
    toml.write_text("[train]\n")
    with pytest.raises(ValueError, match="Unsupported config"):
        pipelines.read_config(toml)
