"""Denoising Diffusion Probabilistic Models (DDPM) scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import torch

from .base import Scheduler, _broadcast, _check_same_shape, _cumulative, _gather
from .beta_schedules import get_beta_schedule, rescale_zero_terminal_snr

logger = logging.getLogger(__name__)


@dataclass
class DDPMConfig:
    timesteps: int = 1000
    beta_schedule: str = "linear"  # linear, scaled_linear, cosine, sigmoid
    schedule_kwargs: Dict[str, Any] = field(default_factory=dict)
    rescale_zero_snr: bool = False
    clip_sample: bool = False
    clip_sample_range: float = 1.0


class DDPM(Scheduler):
    """Denoising Diffusion Probabilistic Models (DDPM) scheduler.

    References: [2006.11239] Denoising Diffusion Probabilistic Models.
    """

    def __init__(self, betas: torch.Tensor, *, clip_sample: bool = False, clip_sample_range: float = 1.0):
        super().__init__(betas)
        if clip_sample_range <= 0:
            raise ValueError("clip_sample_range must be positive.")
        self.clip_sample = bool(clip_sample)
        self.clip_sample_range = float(clip_sample_range)

        betas, alpha_bar, alpha_bar_prev = _cumulative(self.betas)
        one_minus_alpha_bar = 1.0 - alpha_bar
        dtype = self.betas.dtype
        self.posterior_variance = (betas * (1.0 - alpha_bar_prev) / one_minus_alpha_bar).to(dtype=dtype)
        self.posterior_mean_coef_x0 = (betas * torch.sqrt(alpha_bar_prev) / one_minus_alpha_bar).to(dtype=dtype)
        self.posterior_mean_coef_xt = (
            torch.sqrt(1.0 - betas) * (1.0 - alpha_bar_prev) / one_minus_alpha_bar
        ).to(dtype=dtype)

    @classmethod
    def from_config(cls, cfg: DDPMConfig) -> "DDPM":
        """Build a scheduler from a named beta schedule."""
        betas = get_beta_schedule(cfg.beta_schedule, cfg.timesteps, **dict(cfg.schedule_kwargs or {}))
        if cfg.rescale_zero_snr:
            betas = rescale_zero_terminal_snr(betas)
        logger.debug(
            "Built DDPM scheduler (schedule=%s, T=%d, zero_snr=%s)",
            cfg.beta_schedule,
            cfg.timesteps,
            cfg.rescale_zero_snr,
        )
        return cls(betas, clip_sample=cfg.clip_sample, clip_sample_range=cfg.clip_sample_range)

    def predict_x0(self, xt: torch.Tensor, noise_pred: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
        """Estimate the clean sample from ``x_t`` and the predicted noise."""
        _check_same_shape(xt, noise_pred)
        t = self._check_timesteps(t, xt)
        alpha = _broadcast(_gather(self.sqrt_alpha_bar, t), xt)
        sigma = _broadcast(_gather(self.sqrt_one_minus_alpha_bar, t), xt)
        x0 = (xt - sigma * noise_pred) / alpha.clamp_min(1e-12)
        if self.clip_sample:
            x0 = x0.clamp(-self.clip_sample_range, self.clip_sample_range)
        return x0

    def reverse(
        self,
        xt: torch.Tensor,
        noise_pred: torch.Tensor,
        t: torch.Tensor,
        *,
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Remove noise from model output using the backward diffusion process.

        Returns ``(x_{t-1}, x0_hat)``. ``x_{t-1}`` is sampled from the posterior
        q(x_{t-1} | x_t, x0_hat); entries with ``t == 0`` get the posterior mean.
        """
        t = self._check_timesteps(t, xt)
        x0 = self.predict_x0(xt, noise_pred, t)

        coef_x0 = _broadcast(_gather(self.posterior_mean_coef_x0, t), xt)
        coef_xt = _broadcast(_gather(self.posterior_mean_coef_xt, t), xt)
        mean = coef_x0 * x0 + coef_xt * xt

        variance = _gather(self.posterior_variance, t).clamp_min(1e-20)
        std = _broadcast(torch.sqrt(variance), xt)
        nonzero = _broadcast((t > 0).to(dtype=xt.dtype), xt)
        noise = torch.randn(xt.shape, generator=generator, device=xt.device, dtype=xt.dtype)
        x_prev = mean + nonzero * std * noise
        return x_prev, x0
