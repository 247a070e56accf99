"""Headless-safe plotting of training error."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Tuple


class PlotAdapter:
    """Record the worst output error of every step and draw it on ``close``.

    Sweep boundaries reported through ``on_epoch`` are drawn as faint
    vertical lines, and ``tolerance`` (when given) as a dashed horizontal one.
    """

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        tolerance: Optional[float] = None,
    ) -> None:
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.tolerance = tolerance
        self._errors: List[Tuple[int, float]] = []
        self._sweeps: List[int] = []

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        if self.enable_plots:
            self._errors.append((step, float(metrics.get("max_error", 0.0))))

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if self.enable_plots and "iterations" in metrics:
            self._sweeps.append(int(metrics["iterations"]))

    def close(self) -> str | None:
        if not self.enable_plots or not self._errors:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        self.run_dir.mkdir(parents=True, exist_ok=True)
        steps, errors = zip(*self._errors)
        fig, ax = plt.subplots()
        ax.plot(steps, errors, linewidth=0.8)
        for boundary in self._sweeps:
            ax.axvline(boundary, color="0.85", linewidth=0.5, zorder=0)
        if self.tolerance is not None:
            ax.axhline(self.tolerance, color="tab:red", linestyle="--", label="tolerance")
            ax.legend()
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Max output error")
        ax.set_title("Training error")
        plot_path = self.run_dir / "error.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return str(plot_path)


__all__ = ["PlotAdapter"]
