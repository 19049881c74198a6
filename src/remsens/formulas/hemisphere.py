"""Numerical integration over the upper hemisphere.

Midpoint rule on an exact partition of ``theta in [0, pi/2]`` and
``phi in [0, 2 pi)``. ``step`` is the requested angular resolution in
radians; the actual cell size is adjusted so that cells tile the interval.
Integrands are plain Python callables ``f(theta, phi) -> float``.
"""

from __future__ import annotations

import math
from typing import Callable

import numpy as np

from remsens.contracts import Contract, requires


AngularFunction = Callable[[float, float], float]

MAX_STEP = 0.5


def resolve_step(step: float | None) -> float:
    """Explicit step, or the configured ``integration_step``."""
    if step is not None:
        return step
    from remsens.config import get_settings

    return get_settings().integration_step


def step_contract() -> Contract:
    return requires(
        "step_valid",
        "step",
        lambda s: 0.0 < s <= MAX_STEP,
        f"integration step must lie in (0, {MAX_STEP}] rad",
    )


def callable_contract(*args: str) -> Contract:
    return requires(
        "angular_function",
        args,
        lambda *fns: all(callable(f) for f in fns),
        f"{', '.join(args)} must be callable as f(theta, phi)",
    )


def _midpoints(upper: float, step: float) -> tuple[np.ndarray, float]:
    n = max(1, int(math.ceil(upper / step)))
    d = upper / n
    return (np.arange(n, dtype=np.float64) + 0.5) * d, d


def hemisphere_grid(step: float) -> tuple[np.ndarray, np.ndarray, float]:
    """Return ``(theta, phi, cell_area)`` with 2D ``theta``/``phi`` grids."""
    theta, dt = _midpoints(math.pi / 2.0, step)
    phi, dp = _midpoints(2.0 * math.pi, step)
    tt, pp = np.meshgrid(theta, phi, indexing="ij")
    return tt, pp, dt * dp


def sample(fn: AngularFunction, theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
    return np.vectorize(fn, otypes=[np.float64])(theta, phi)


def integrate(fn: AngularFunction, step: float, *, projected: bool = False) -> float:
    """Integrate ``fn`` over the hemisphere with the ``sin(theta)`` measure.

    ``projected=True`` adds the ``cos(theta)`` factor (irradiance from radiance).
    """
    tt, pp, cell = hemisphere_grid(step)
    weight = np.sin(tt)
    if projected:
        weight = weight * np.cos(tt)
    return float(np.sum(sample(fn, tt, pp) * weight) * cell)


def weighted_mean(fn: AngularFunction, weight_fn: AngularFunction, step: float) -> float:
    """``integral(fn * weight_fn) / integral(weight_fn)`` over the hemisphere."""
    tt, pp, _ = hemisphere_grid(step)
    w = sample(weight_fn, tt, pp) * np.sin(tt)
    return float(np.sum(sample(fn, tt, pp) * w) / np.sum(w))
