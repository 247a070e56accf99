"""Command line entry point for neuralnetlib training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from neuralnetlib.logs import configure_logging
from neuralnetlib.training import pipelines


def _format_result(result) -> str:
    payload = {
        "iterations": result.iterations,
        "converged": result.converged,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
        "network": result.network_path,
    }
    evaluation = result.extras.get("evaluation")
    if isinstance(evaluation, dict):
        payload["max_error"] = evaluation["max_error"]
        payload["rounded_accuracy"] = evaluation["rounded_accuracy"]
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(pipelines.presets().keys()),
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed for weight initialisation")
    parser.add_argument("--run-dir", help="Directory receiving run artifacts")
    parser.add_argument("--max-iterations", type=int, help="Override the iteration budget")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write an error curve with matplotlib"
    )
    parser.add_argument(
        "--log-level", help="Log level (defaults to $NEURALNETLIB_LOG_LEVEL or WARNING)"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = dict(pipelines.load_preset(args.preset))
    if args.config:
        override = pipelines.read_config(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    train_cfg = dict(config.get("train", {}))
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.max_iterations is not None:
        train_cfg["max_iterations"] = int(args.max_iterations)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    config["train"] = train_cfg

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
