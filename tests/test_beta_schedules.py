import pytest
import torch

from schedulers.beta_schedules import (
    alpha_bar_from_betas,
    cosine_beta_schedule,
    get_beta_schedule,
    linear_beta_schedule,
    rescale_zero_terminal_snr,
    scaled_linear_beta_schedule,
    sigmoid_beta_schedule,
)

ALL_SCHEDULES = [linear_beta_schedule, scaled_linear_beta_schedule, cosine_beta_schedule, sigmoid_beta_schedule]


@pytest.mark.parametrize("schedule_fn", ALL_SCHEDULES)
def test_schedules_have_requested_length_and_valid_range(schedule_fn):
    betas = schedule_fn(1000)
    assert betas.shape == (1000,)
    assert betas.dtype == torch.float32
    assert torch.all(betas > 0)
    assert torch.all(betas <= 1)
    alpha_bar = alpha_bar_from_betas(betas)
    assert torch.all(alpha_bar[1:] <= alpha_bar[:-1])


@pytest.mark.parametrize("schedule_fn", ALL_SCHEDULES)
def test_schedules_reject_non_positive_timesteps(schedule_fn):
    with pytest.raises(ValueError):
        schedule_fn(0)
    with pytest.raises(ValueError):
        schedule_fn(2.5)


def test_linear_schedule_endpoints():
    betas = linear_beta_schedule(100, 1e-4, 2e-2)
    assert betas[0].item() == pytest.approx(1e-4, rel=1e-5)
    assert betas[-1].item() == pytest.approx(2e-2, rel=1e-5)
    steps = betas[1:] - betas[:-1]
    assert torch.allclose(steps, steps[0].expand_as(steps), atol=1e-7)


def test_scaled_linear_schedule_is_linear_in_sqrt_beta():
    betas = scaled_linear_beta_schedule(101)
    assert betas[0].item() == pytest.approx(1e-4, rel=1e-5)
    assert betas[-1].item() == pytest.approx(2e-2, rel=1e-5)
    assert betas[50] < linear_beta_schedule(101)[50]
    roots = betas.double().sqrt()
    steps = roots[1:] - roots[:-1]
    assert torch.allclose(steps, steps[0].expand_as(steps), atol=1e-6)


def test_cosine_schedule_is_capped_at_beta_max():
    betas = cosine_beta_schedule(1000)
    assert betas.max().item() == pytest.approx(0.999, rel=1e-6)
    capped = cosine_beta_schedule(1000, beta_max=0.5)
    assert capped.max().item() == pytest.approx(0.5, rel=1e-6)
    assert torch.all(betas[1:] >= betas[:-1] - 1e-7)


def test_sigmoid_schedule_is_monotonic_between_endpoints():
    betas = sigmoid_beta_schedule(1001, 1e-4, 2e-2)
    assert torch.all(betas[1:] >= betas[:-1])
    assert betas[0] > 1e-4
    assert betas[-1] < 2e-2
    assert betas[500].item() == pytest.approx((1e-4 + 2e-2) / 2, rel=1e-4)


def test_rescale_zero_terminal_snr():
    betas = linear_beta_schedule(1000)
    rescaled = rescale_zero_terminal_snr(betas)
    assert rescaled.shape == betas.shape
    assert rescaled[-1].item() == pytest.approx(1.0)

    alpha_bar = alpha_bar_from_betas(betas)
    rescaled_alpha_bar = alpha_bar_from_betas(rescaled)
    assert rescaled_alpha_bar[-1].item() == pytest.approx(0.0, abs=1e-12)
    assert rescaled_alpha_bar[0].item() == pytest.approx(alpha_bar[0].item(), rel=1e-5)
    assert torch.all(rescaled_alpha_bar[1:] <= rescaled_alpha_bar[:-1])


def test_rescale_rejects_bad_input():
    with pytest.raises(ValueError):
        rescale_zero_terminal_snr(torch.full((4, 4), 0.01))
    with pytest.raises(ValueError):
        rescale_zero_terminal_snr(torch.tensor([0.01]))


def test_get_beta_schedule_dispatches_by_name():
    assert torch.equal(get_beta_schedule("Cosine", 50), cosine_beta_schedule(50))
    assert torch.equal(
        get_beta_schedule("linear", 10, beta_start=1e-3, beta_end=1e-2),
        linear_beta_schedule(10, 1e-3, 1e-2),
    )
    with pytest.raises(ValueError, match="Unsupported schedule"):
        get_beta_schedule("quadratic", 10)
