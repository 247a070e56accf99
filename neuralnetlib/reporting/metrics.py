"""Metric sinks attached to a trainer as callbacks.

Sinks record one row per ``on_epoch`` call, which the trainer issues once
per sweep of :meth:`~neuralnetlib.training.trainer.Trainer.retrain`.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, Mapping, Sequence

from .artifacts import git_sha

CSV_FIELDS: Sequence[str] = ("epoch", "split", "iterations", "max_error")


def _numeric(metrics: Mapping[str, object]) -> Dict[str, float]:
    return {k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))}


def _reset(path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


class JsonlSink:
    """One JSON object per sweep, tagged with the run's seed and git sha."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = _reset(path)
        self.split = split
        self.seed = seed
        self.sha = sha or git_sha()

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record: Dict[str, object] = {
            "epoch": int(epoch),
            "split": self.split,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """CSV rows restricted to :data:`CSV_FIELDS`; missing values are left blank."""

    def __init__(
        self, path: str | Path, *, split: str = "train", fields: Sequence[str] = CSV_FIELDS
    ) -> None:
        self.path = _reset(path)
        self.split = split
        self.fields = list(fields)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row: Dict[str, object] = {"epoch": int(epoch), "split": self.split}
        row.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.fields, extrasaction="ignore")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_epoch


__all__ = ["CSV_FIELDS", "JsonlSink", "CsvSink"]
