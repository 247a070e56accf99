"""Run artifact helpers."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import numpy as np


def git_sha() -> str:
    """HEAD of the enclosing git checkout, or ``"unknown"`` outside one."""

    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return out.decode().strip()


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    layer_sizes: Sequence[int],
    data_provenance: Mapping[str, object],
    parameter_count: Optional[int] = None,
) -> str:
    """Record which network shape was trained, on which examples, under which config."""

    sizes = [int(s) for s in layer_sizes]
    network: Dict[str, object] = {
        "layer_sizes": sizes,
        "connections": sum(a * b for a, b in zip(sizes, sizes[1:])),
    }
    if parameter_count is not None:
        network["parameters"] = int(parameter_count)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "network": network,
        "data": dict(data_provenance),
        "environment": {"python": platform.python_version(), "numpy": np.__version__},
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["git_sha", "write_manifest"]
