import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_runs_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "or", "--max-iterations", "200", "--seed", "3"])
    run_dir = Path("runs/or")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "network.txt").exists()

    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["network"] == str(run_dir / "network.txt")
    assert payload["iterations"] <= 200


def test_cli_applies_config_and_dumps_it(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"model": {"hidden": [2]}}))
    dumped = tmp_path / "out" / "config.json"

    main(
        [
            "--preset",
            "and",
            "--config",
            str(override),
            "--run-dir",
            str(tmp_path / "custom"),
            "--max-iterations",
            "20",
            "--dump-config",
            str(dumped),
        ]
    )
    config = json.loads(dumped.read_text())
    assert config["model"]["hidden"] == [2]
    assert config["train"]["max_iterations"] == 20
    assert (tmp_path / "custom" / "summary.json").exists()


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.split() == ["and", "or", "xor"]
