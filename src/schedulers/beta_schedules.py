"""Beta schedules for DDPM-style diffusion processes.

Every schedule returns a 1D ``float32`` tensor ``betas`` of length ``T`` where
``betas[t - 1]`` is the variance added at step ``t`` of the forward process.
"""

from __future__ import annotations

import math
from typing import Callable, Dict

import torch


def _check_timesteps(T: int) -> int:
    if isinstance(T, bool) or int(T) != T:
        raise ValueError(f"Number of timesteps must be an integer, got {T!r}.")
    T = int(T)
    if T <= 0:
        raise ValueError("Timesteps must be positive.")
    return T


def linear_beta_schedule(T: int, beta_start: float = 1e-4, beta_end: float = 2e-2) -> torch.Tensor:
    """Linear beta schedule from ``beta_start`` (t=1) to ``beta_end`` (t=T).

    References: [2006.11239] Denoising Diffusion Probabilistic Models.
    """
    T = _check_timesteps(T)
    betas = torch.linspace(beta_start, beta_end, T, dtype=torch.float64)
    return betas.to(dtype=torch.float32)


def scaled_linear_beta_schedule(T: int, beta_start: float = 1e-4, beta_end: float = 2e-2) -> torch.Tensor:
    """Linear in sqrt(beta), then squared.

    References: [2006.11239] Denoising Diffusion Probabilistic Models.
    """
    T = _check_timesteps(T)
    betas = torch.linspace(math.sqrt(beta_start), math.sqrt(beta_end), T, dtype=torch.float64) ** 2
    return betas.to(dtype=torch.float32)


def cosine_beta_schedule(T: int, beta_max: float = 0.999, eps: float = 1e-3) -> torch.Tensor:
    """Cosine beta schedule.

    ``alpha_bar(t) = cos(((t / T) + eps) / (1 + eps) * pi / 2) ** 2`` and
    ``beta_t = 1 - alpha_bar(t) / alpha_bar(t - 1)``, clipped to ``beta_max``.
    ``eps`` keeps beta away from zero near t=0.

    References: [2102.09672] Improved Denoising Diffusion Probabilistic Models
    (github: openai/improved-diffusion).
    """
    T = _check_timesteps(T)
    steps = torch.arange(T + 1, dtype=torch.float64)
    alpha_bar = torch.cos((steps / T + eps) / (1 + eps) * math.pi / 2) ** 2
    betas = 1.0 - alpha_bar[1:] / alpha_bar[:-1]
    betas = torch.clamp(betas, max=beta_max)
    return betas.to(dtype=torch.float32)


def sigmoid_beta_schedule(T: int, beta_start: float = 1e-4, beta_end: float = 2e-2) -> torch.Tensor:
    """Sigmoid-shaped beta schedule over ``[-6, 6]``.

    References: [2203.02923] GeoDiff: a Geometric Diffusion Model for Molecular
    Conformation Generation (github: MinkaiXu/GeoDiff).
    """
    T = _check_timesteps(T)
    x = torch.linspace(-6.0, 6.0, T, dtype=torch.float64)
    betas = torch.sigmoid(x) * (beta_end - beta_start) + beta_start
    return betas.to(dtype=torch.float32)


def rescale_zero_terminal_snr(betas: torch.Tensor) -> torch.Tensor:
    """Rescale betas so the final timestep has zero signal-to-noise ratio.

    sqrt(alpha_bar) is shifted so its last value is 0 and scaled so its first
    value is unchanged, then converted back to betas. The last returned beta
    is exactly 1.

    References: [2305.08891] Common Diffusion Noise Schedules and Sample Steps
    are Flawed (Alg. 1).
    """
    betas = torch.as_tensor(betas)
    if betas.ndim != 1:
        raise ValueError("betas must be a 1D tensor.")
    if betas.numel() < 2:
        raise ValueError("Rescaling needs at least two timesteps.")
    dtype = betas.dtype if betas.is_floating_point() else torch.float32
    alphas = 1.0 - betas.to(dtype=torch.float64)
    alpha_bar_sqrt = torch.cumprod(alphas, dim=0).sqrt()

    first = alpha_bar_sqrt[0].clone()
    last = alpha_bar_sqrt[-1].clone()
    if torch.isclose(first, last):
        raise ValueError("Cannot rescale a schedule whose alpha_bar is constant.")
    alpha_bar_sqrt = (alpha_bar_sqrt - last) * first / (first - last)

    alpha_bar = alpha_bar_sqrt**2
    alphas = torch.cat([alpha_bar[:1], alpha_bar[1:] / alpha_bar[:-1]])
    return (1.0 - alphas).to(dtype=dtype)


BETA_SCHEDULES: Dict[str, Callable[..., torch.Tensor]] = {
    "linear": linear_beta_schedule,
    "scaled_linear": scaled_linear_beta_schedule,
    "cosine": cosine_beta_schedule,
    "sigmoid": sigmoid_beta_schedule,
}


def get_beta_schedule(name: str, T: int, **kwargs) -> torch.Tensor:
    """Build a named beta schedule."""
    key = name.lower()
    if key not in BETA_SCHEDULES:
        raise ValueError(f"Unsupported schedule '{name}'. Expected one of {sorted(BETA_SCHEDULES)}.")
    return BETA_SCHEDULES[key](T, **kwargs)


def alpha_bar_from_betas(betas: torch.Tensor) -> torch.Tensor:
    """Cumulative product of ``1 - betas``."""
    return torch.cumprod(1.0 - betas, dim=0)
