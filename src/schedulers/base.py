"""Abstract scheduler holding precomputed diffusion coefficients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import torch


class Scheduler(ABC):
    """Abstract type for schedulers.

    Subclasses get the forward process and velocity targets for free and only
    need to implement :meth:`reverse`.
    """

    def __init__(self, betas: torch.Tensor):
        betas = torch.as_tensor(betas)
        if betas.ndim != 1:
            raise ValueError("betas must be a 1D tensor.")
        if betas.numel() == 0:
            raise ValueError("betas must contain at least one timestep.")
        if not betas.is_floating_point():
            betas = betas.to(dtype=torch.float32)
        if not torch.all((betas > 0) & (betas <= 1)):
            raise ValueError("betas must lie in (0, 1].")

        self.betas = betas
        self.timesteps = int(betas.numel())
        # derived in float64; 1 - alpha_bar loses most of its precision in float32 near t=0
        betas64, alpha_bar, alpha_bar_prev = _cumulative(betas)
        self.alphas = (1.0 - betas64).to(dtype=betas.dtype)
        self.alpha_bar = alpha_bar.to(dtype=betas.dtype)
        self.alpha_bar_prev = alpha_bar_prev.to(dtype=betas.dtype)
        self.sqrt_alpha_bar = torch.sqrt(alpha_bar).to(dtype=betas.dtype)
        self.sqrt_one_minus_alpha_bar = torch.sqrt(1.0 - alpha_bar).to(dtype=betas.dtype)

    def __len__(self) -> int:
        return self.timesteps

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timesteps={self.timesteps}, dtype={self.betas.dtype}, device={self.betas.device})"

    def to(self, device: torch.device | str) -> "Scheduler":
        """Return a copy of the scheduler with its coefficients on ``device``."""
        copied = object.__new__(type(self))
        for key, value in vars(self).items():
            setattr(copied, key, value.to(device) if isinstance(value, torch.Tensor) else value)
        return copied

    @property
    def device(self) -> torch.device:
        return self.betas.device

    def forward(self, x0: torch.Tensor, noise: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
        """Add noise to clean data using the forward diffusion process.

        Returns ``x_t = sqrt(alpha_bar_t) * x0 + sqrt(1 - alpha_bar_t) * noise``.
        """
        _check_same_shape(x0, noise)
        t = self._check_timesteps(t, x0)
        alpha = _broadcast(_gather(self.sqrt_alpha_bar, t), x0)
        sigma = _broadcast(_gather(self.sqrt_one_minus_alpha_bar, t), x0)
        return alpha * x0 + sigma * noise

    def get_velocity(self, x0: torch.Tensor, noise: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
        """Compute the velocity ``v_t = sqrt(alpha_bar_t) * noise - sqrt(1 - alpha_bar_t) * x0``.

        References: [2202.00512] Progressive Distillation for Fast Sampling of
        Diffusion Models (App. D).
        """
        _check_same_shape(x0, noise)
        t = self._check_timesteps(t, x0)
        alpha = _broadcast(_gather(self.sqrt_alpha_bar, t), x0)
        sigma = _broadcast(_gather(self.sqrt_one_minus_alpha_bar, t), x0)
        return alpha * noise - sigma * x0

    @abstractmethod
    def reverse(
        self,
        xt: torch.Tensor,
        noise_pred: torch.Tensor,
        t: torch.Tensor,
        *,
        generator: Optional[torch.Generator] = None,
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Remove predicted noise, returning ``(x_{t-1}, x0_hat)``."""

    def _check_timesteps(self, t: torch.Tensor, reference: torch.Tensor) -> torch.Tensor:
        t = torch.as_tensor(t, device=self.device)
        if t.is_floating_point():
            raise ValueError("Timesteps must be an integer tensor.")
        t = t.to(dtype=torch.long)
        if t.ndim == 0:
            t = t.expand(reference.shape[0] if reference.ndim > 0 else 1)
        if t.ndim != 1:
            raise ValueError("Timesteps must be a scalar or a 1D tensor of shape [B].")
        if reference.ndim == 0 or t.shape[0] != reference.shape[0]:
            raise ValueError(
                f"Timestep batch size {t.shape[0]} does not match data batch size "
                f"{reference.shape[0] if reference.ndim > 0 else 0}."
            )
        if t.numel() and (int(t.min()) < 0 or int(t.max()) >= self.timesteps):
            raise IndexError(f"Timesteps must lie in [0, {self.timesteps}).")
        return t


def _cumulative(betas: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Return float64 ``(betas, alpha_bar, alpha_bar_prev)`` with ``alpha_bar_prev[0] = 1``."""
    betas64 = betas.to(dtype=torch.float64)
    alpha_bar = torch.cumprod(1.0 - betas64, dim=0)
    alpha_bar_prev = torch.cat([torch.ones_like(alpha_bar[:1]), alpha_bar[:-1]])
    return betas64, alpha_bar, alpha_bar_prev


def _gather(values: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
    gathered = values.index_select(0, t)
    return gathered.view(t.shape)


def _broadcast(coeff: torch.Tensor, like: torch.Tensor) -> torch.Tensor:
    coeff = coeff.to(device=like.device, dtype=like.dtype)
    while coeff.ndim < like.ndim:
        coeff = coeff.unsqueeze(-1)
    return coeff


def _check_same_shape(a: torch.Tensor, b: torch.Tensor) -> None:
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {tuple(a.shape)} vs {tuple(b.shape)}.")
