"""Hydra entry point exporting beta and alpha_bar schedules as tables and plots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List

import hydra
import pandas as pd
import torch
from hydra.core.config_store import ConfigStore
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

from schedulers.beta_schedules import BETA_SCHEDULES, alpha_bar_from_betas, get_beta_schedule, rescale_zero_terminal_snr
from utils.logging import write_summary_json
from utils.plotting import plot_schedule_curves

logger = logging.getLogger(__name__)


@dataclass
class ScheduleExportConfig:
    timesteps: int = 1000
    schedules: List[str] = field(default_factory=lambda: ["linear", "scaled_linear", "cosine", "sigmoid"])
    rescale_zero_snr: bool = False
    output_dir: str = "outputs/schedules"
    plot: bool = True
    log_scale_betas: bool = True

    def __post_init__(self) -> None:
        self.schedules = [str(name).lower() for name in self.schedules]
        unknown = [name for name in self.schedules if name not in BETA_SCHEDULES]
        if unknown:
            raise ValueError(f"Unsupported schedules {unknown}. Expected any of {sorted(BETA_SCHEDULES)}.")
        if not self.schedules:
            raise ValueError("At least one schedule must be requested.")


cs = ConfigStore.instance()
cs.store(name="schedules_base", node=ScheduleExportConfig)


def _filter_kwargs(datatype, data: dict) -> dict:
    valid = {f.name for f in fields(datatype)}
    return {k: v for k, v in data.items() if k in valid}


def load_export_config(cfg: DictConfig) -> ScheduleExportConfig:
    container = OmegaConf.to_container(cfg, resolve=True)
    if not isinstance(container, dict):
        raise TypeError("Expected dict config for schedule export")
    return ScheduleExportConfig(**_filter_kwargs(ScheduleExportConfig, container))


def build_schedules(cfg: ScheduleExportConfig) -> dict[str, torch.Tensor]:
    betas: dict[str, torch.Tensor] = {}
    for name in cfg.schedules:
        schedule = get_beta_schedule(name, cfg.timesteps)
        if cfg.rescale_zero_snr:
            schedule = rescale_zero_terminal_snr(schedule)
        betas[name] = schedule
    return betas


def export_schedules(cfg: ScheduleExportConfig, output_dir: Path | str | None = None) -> pd.DataFrame:
    """Write ``schedules.csv``, per-schedule stats, a JSON summary and optional plots."""
    out_dir = Path(output_dir if output_dir is not None else cfg.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    betas = build_schedules(cfg)
    alpha_bars = {name: alpha_bar_from_betas(values) for name, values in betas.items()}

    table: dict[str, object] = {"t": list(range(1, cfg.timesteps + 1))}
    for name in cfg.schedules:
        table[f"{name}_beta"] = betas[name].numpy()
        table[f"{name}_alpha_bar"] = alpha_bars[name].numpy()
    df = pd.DataFrame(table)
    csv_path = out_dir / "schedules.csv"
    df.to_csv(csv_path, index=False)
    logger.info("Wrote %d timesteps for %d schedules to %s", cfg.timesteps, len(cfg.schedules), csv_path)

    stats: dict[str, dict[str, float]] = {}
    for name in cfg.schedules:
        final = float(alpha_bars[name][-1])
        row = {
            "beta_min": float(betas[name].min()),
            "beta_max": float(betas[name].max()),
            "alpha_bar_final": final,
            "terminal_snr": final / max(1.0 - final, 1e-12),
        }
        stats[name] = row
    stats_df = pd.DataFrame([{"schedule": name, **row} for name, row in stats.items()])
    stats_df.to_csv(out_dir / "schedule_stats.csv", index=False)

    plots: list[str] = []
    if cfg.plot:
        plots.append(
            str(
                plot_schedule_curves(
                    betas,
                    out_dir / "beta_schedules.png",
                    ylabel="beta",
                    title="Beta schedules",
                    log_scale=cfg.log_scale_betas,
                )
            )
        )
        plots.append(
            str(
                plot_schedule_curves(
                    alpha_bars,
                    out_dir / "alpha_bar_schedules.png",
                    ylabel="alpha_bar",
                    title="Cumulative alpha schedules",
                )
            )
        )

    write_summary_json(
        out_dir / "summary.json",
        {
            "timesteps": cfg.timesteps,
            "rescale_zero_snr": cfg.rescale_zero_snr,
            "schedules": stats,
            "plots": plots,
        },
    )
    return df


@hydra.main(version_base=None, config_path="../../conf", config_name="schedules/base")
def main(cfg: DictConfig) -> None:
    OmegaConf.set_struct(cfg, False)
    export_cfg = load_export_config(cfg)
    export_schedules(export_cfg, to_absolute_path(export_cfg.output_dir))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
