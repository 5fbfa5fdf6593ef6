"""Plotting utilities for beta and alpha_bar schedules."""
from __future__ import annotations

from pathlib import Path
from typing import Mapping

import matplotlib

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np
import torch

SCHEDULE_LABELS = {
    "linear": "Linear",
    "scaled_linear": "Scaled linear",
    "cosine": "Cosine",
    "sigmoid": "Sigmoid",
}


def _as_numpy(values: torch.Tensor | np.ndarray) -> np.ndarray:
    if isinstance(values, torch.Tensor):
        return values.detach().cpu().to(dtype=torch.float64).numpy()
    return np.asarray(values, dtype=np.float64)


def plot_schedule_curves(
    curves: Mapping[str, torch.Tensor | np.ndarray],
    output_path: Path | str,
    *,
    ylabel: str,
    title: str,
    log_scale: bool = False,
) -> Path:
    """Plot one curve per schedule against the 1-based timestep t."""
    if not curves:
        raise ValueError("No schedules to plot.")
    plt.figure(figsize=(10, 6))
    for name, values in curves.items():
        y = _as_numpy(values)
        t = np.arange(1, y.shape[0] + 1)
        plt.plot(t, y, label=SCHEDULE_LABELS.get(name, name))
    if log_scale:
        plt.yscale("log")
    plt.title(title)
    plt.xlabel("t")
    plt.ylabel(ylabel)
    plt.legend()
    plt.grid(True, alpha=0.3)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(output_path)
    plt.close()
    return output_path
