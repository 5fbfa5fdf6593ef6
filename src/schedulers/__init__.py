"""Noise schedulers for diffusion models."""

from __future__ import annotations

from typing import Optional, Tuple

import torch

from .base import Scheduler
from .beta_schedules import (
    BETA_SCHEDULES,
    alpha_bar_from_betas,
    cosine_beta_schedule,
    get_beta_schedule,
    linear_beta_schedule,
    rescale_zero_terminal_snr,
    scaled_linear_beta_schedule,
    sigmoid_beta_schedule,
)
from .ddpm import DDPM, DDPMConfig


def forward(scheduler: Scheduler, x0: torch.Tensor, noise: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
    """Add noise to clean data using the forward diffusion process."""
    return scheduler.forward(x0, noise, t)


def get_velocity(scheduler: Scheduler, x0: torch.Tensor, noise: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
    """Compute the velocity of the diffusion process."""
    return scheduler.get_velocity(x0, noise, t)


def reverse(
    scheduler: Scheduler,
    xt: torch.Tensor,
    noise_pred: torch.Tensor,
    t: torch.Tensor,
    *,
    generator: Optional[torch.Generator] = None,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """Remove noise from model output using the backward diffusion process."""
    return scheduler.reverse(xt, noise_pred, t, generator=generator)


__all__ = [
    "BETA_SCHEDULES",
    "DDPM",
    "DDPMConfig",
    "Scheduler",
    "alpha_bar_from_betas",
    "cosine_beta_schedule",
    "forward",
    "get_beta_schedule",
    "get_velocity",
    "linear_beta_schedule",
    "rescale_zero_terminal_snr",
    "reverse",
    "scaled_linear_beta_schedule",
    "sigmoid_beta_schedule",
]
