from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from hydra import compose, initialize_config_dir
from omegaconf import OmegaConf

from schedulers.export import ScheduleExportConfig, export_schedules, load_export_config

CONF_DIR = Path(__file__).resolve().parents[1] / "conf"


def test_load_export_config_from_omegaconf() -> None:
    cfg = OmegaConf.create({"timesteps": 64, "schedules": ["Linear", "cosine"], "plot": False, "extra": 1})
    export_cfg = load_export_config(cfg)
    assert export_cfg.timesteps == 64
    assert export_cfg.schedules == ["linear", "cosine"]
    assert export_cfg.plot is False


def test_export_config_rejects_unknown_schedule() -> None:
    with pytest.raises(ValueError, match="Unsupported schedules"):
        ScheduleExportConfig(schedules=["linear", "exponential"])


def test_export_schedules_writes_artifacts(tmp_path: Path) -> None:
    cfg = ScheduleExportConfig(timesteps=50, output_dir=str(tmp_path))
    df = export_schedules(cfg)

    assert len(df) == 50
    assert df["t"].iloc[0] == 1
    assert df["linear_beta"].iloc[0] == pytest.approx(1e-4, rel=1e-5)
    assert (df["cosine_alpha_bar"].diff().dropna() <= 0).all()

    table = pd.read_csv(tmp_path / "schedules.csv")
    assert list(table.columns) == [
        "t",
        "linear_beta",
        "linear_alpha_bar",
        "scaled_linear_beta",
        "scaled_linear_alpha_bar",
        "cosine_beta",
        "cosine_alpha_bar",
        "sigmoid_beta",
        "sigmoid_alpha_bar",
    ]
    stats = pd.read_csv(tmp_path / "schedule_stats.csv")
    assert list(stats["schedule"]) == ["linear", "scaled_linear", "cosine", "sigmoid"]

    summary = json.loads((tmp_path / "summary.json").read_text())
    assert summary["timesteps"] == 50
    assert len(summary["plots"]) == 2
    assert (tmp_path / "beta_schedules.png").exists()
    assert (tmp_path / "alpha_bar_schedules.png").exists()


def test_export_zero_snr_without_plots(tmp_path: Path) -> None:
    cfg = ScheduleExportConfig(timesteps=20, schedules=["scaled_linear"], rescale_zero_snr=True, plot=False)
    df = export_schedules(cfg, tmp_path / "zero_snr")

    assert df["scaled_linear_alpha_bar"].iloc[-1] == pytest.approx(0.0, abs=1e-12)
    assert df["scaled_linear_beta"].iloc[-1] == pytest.approx(1.0)
    summary = json.loads((tmp_path / "zero_snr" / "summary.json").read_text())
    assert summary["plots"] == []
    assert summary["schedules"]["scaled_linear"]["terminal_snr"] == pytest.approx(0.0, abs=1e-9)
    assert not (tmp_path / "zero_snr" / "beta_schedules.png").exists()


def test_compose_base_config_with_root_overrides(tmp_path: Path) -> None:
    with initialize_config_dir(version_base=None, config_dir=str(CONF_DIR)):
        cfg = compose(
            config_name="schedules/base",
            overrides=["timesteps=8", "plot=false", "schedules=[cosine,sigmoid]"],
        )
    assert "timesteps" in cfg
    export_cfg = load_export_config(cfg)
    assert export_cfg.timesteps == 8
    assert export_cfg.plot is False
    assert export_cfg.schedules == ["cosine", "sigmoid"]
    assert export_cfg.output_dir == "outputs/schedules"

    df = export_schedules(export_cfg, tmp_path)
    assert len(df) == 8
    assert list(df.columns) == ["t", "cosine_beta", "cosine_alpha_bar", "sigmoid_beta", "sigmoid_alpha_bar"]


def test_base_config_defaults_match_dataclass() -> None:
    with initialize_config_dir(version_base=None, config_dir=str(CONF_DIR)):
        cfg = compose(config_name="schedules/base")
    assert load_export_config(cfg) == ScheduleExportConfig()


def test_export_rerun_overwrites_tables(tmp_path: Path) -> None:
    cfg = ScheduleExportConfig(timesteps=10, plot=False)
    export_schedules(cfg, tmp_path)
    export_schedules(cfg, tmp_path)

    stats = pd.read_csv(tmp_path / "schedule_stats.csv")
    assert len(stats) == 4
    table = pd.read_csv(tmp_path / "schedules.csv")
    assert len(table) == 10
    assert table["linear_beta"].iloc[0] == pytest.approx(1e-4, rel=1e-12)
