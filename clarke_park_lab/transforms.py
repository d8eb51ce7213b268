"""
Three-phase signal generation and the Clarke / Park coordinate transforms.

All transforms use the amplitude-invariant convention: the αβ and dq magnitudes equal
the peak value of each phase.
"""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

PI = math.pi
TWO_PI = 2.0 * PI
SQRT3 = math.sqrt(3.0)
TWO_THIRDS = 2.0 / 3.0

# Phase axes at 0°, 120°, 240°
PHASE_SHIFTS = np.array([0.0, TWO_PI / 3.0, -TWO_PI / 3.0])


class PhaseTriple(NamedTuple):
    a: float
    b: float
    c: float


class ClarkePair(NamedTuple):
    alpha: float
    beta: float


class ParkPair(NamedTuple):
    d: float
    q: float


def three_phase(angle: float, amplitude: float) -> PhaseTriple:
    """Balanced three-phase instantaneous values at the given angle."""
    return PhaseTriple(
        amplitude * math.cos(angle),
        amplitude * math.cos(angle - TWO_PI / 3.0),
        amplitude * math.cos(angle + TWO_PI / 3.0),
    )


def three_phase_array(angles, amplitude: float) -> np.ndarray:
    """Vectorized three_phase; returns an (n, 3) array with columns a, b, c."""
    angles = np.atleast_1d(np.asarray(angles, dtype=float))
    return amplitude * np.cos(angles[:, None] - PHASE_SHIFTS[None, :])


def _all_finite(values) -> bool:
    return all(math.isfinite(v) for v in values)


def _unit_scale(values):
    """Split finite values into (scale, values / scale) with |values / scale| <= 1."""
    scale = max(abs(v) for v in values)
    if scale == 0.0 or not math.isfinite(scale):
        return 1.0, tuple(values)
    return scale, tuple(v / scale for v in values)


def _clarke(a: float, b: float, c: float):
    # [alpha] = 2/3 * [ 1   -1/2       -1/2      ] * [a b c]^T
    # [beta ]         [ 0    sqrt(3)/2 -sqrt(3)/2]
    alpha = TWO_THIRDS * (a - 0.5 * b - 0.5 * c)
    beta = TWO_THIRDS * ((SQRT3 / 2.0) * b - (SQRT3 / 2.0) * c)
    return alpha, beta


def _park(alpha: float, beta: float, theta: float):
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return alpha * cos_t + beta * sin_t, -alpha * sin_t + beta * cos_t


def clarke(phase: PhaseTriple) -> ClarkePair:
    result = _clarke(*phase)
    if not _all_finite(result) and _all_finite(phase):
        # intermediate sums overflowed; redo on unit-scaled inputs
        scale, unit = _unit_scale(phase)
        result = tuple(scale * v for v in _clarke(*unit))
    return ClarkePair(*result)


def park(pair: ClarkePair, theta: float) -> ParkPair:
    """Rotate αβ into the dq frame; theta must be the angle that produced the sample."""
    result = _park(pair[0], pair[1], theta)
    if not _all_finite(result) and _all_finite(pair):
        scale, unit = _unit_scale(pair)
        result = tuple(scale * v for v in _park(unit[0], unit[1], theta))
    return ParkPair(*result)


def inverse_park(pair: ParkPair, theta: float) -> ClarkePair:
    d, q = pair
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return ClarkePair(d * cos_t - q * sin_t, d * sin_t + q * cos_t)


def inverse_clarke(pair: ClarkePair) -> PhaseTriple:
    alpha, beta = pair
    return PhaseTriple(
        alpha,
        -0.5 * alpha + (SQRT3 / 2.0) * beta,
        -0.5 * alpha - (SQRT3 / 2.0) * beta,
    )


__all__ = [
    "PI",
    "TWO_PI",
    "SQRT3",
    "PhaseTriple",
    "ClarkePair",
    "ParkPair",
    "three_phase",
    "three_phase_array",
    "clarke",
    "park",
    "inverse_park",
    "inverse_clarke",
]
