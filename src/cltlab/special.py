"""Special functions shared by the density formulas."""

from __future__ import annotations

import numpy as np
from scipy.special import erf

LANCZOS_G = 7
LANCZOS_BASE = 0.99999999999980993
LANCZOS_COEFFICIENTS = (
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)

_SQRT_TWO_PI = np.sqrt(2.0 * np.pi)
_LOG_SQRT_TWO_PI = np.log(_SQRT_TWO_PI)


def _is_pole(z: np.float64) -> bool:
    return bool(z <= 0 and float(z).is_integer())


def _lanczos_sum(z: np.float64) -> np.float64:
    x = np.float64(LANCZOS_BASE)
    for i, coefficient in enumerate(LANCZOS_COEFFICIENTS):
        x += coefficient / (z + i + 1)
    return x


def log_gamma(z: float) -> np.float64:
    """Return ``ln|Γ(z)|`` using the Lanczos approximation (g=7, 8 coefficients).

    Arguments below 0.5 go through the reflection formula. The poles at the
    non-positive integers evaluate to NaN.
    """
    z = np.float64(z)
    if np.isnan(z) or _is_pole(z):
        return np.float64(np.nan)
    if np.isposinf(z):
        return np.float64(np.inf)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if z < 0.5:
            return np.log(np.pi) - np.log(np.abs(np.sin(np.pi * z))) - log_gamma(1.0 - z)
        z = z - 1.0
        x = _lanczos_sum(z)
        t = z + LANCZOS_G + 0.5
        return _LOG_SQRT_TWO_PI + (z + 0.5) * np.log(t) - t + np.log(x)


def gamma(z: float) -> np.float64:
    """Gamma function in direct Lanczos product form.

    Unlike ``exp(log_gamma(z))`` this keeps the sign of ``Γ`` for negative
    non-integer arguments.
    """
    z = np.float64(z)
    if np.isnan(z) or _is_pole(z):
        return np.float64(np.nan)
    if np.isposinf(z):
        return np.float64(np.inf)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if z < 0.5:
            return np.pi / (np.sin(np.pi * z) * gamma(1.0 - z))
        z = z - 1.0
        x = _lanczos_sum(z)
        t = z + LANCZOS_G + 0.5
        return _SQRT_TWO_PI * np.power(t, z + 0.5) * np.exp(-t) * x


def beta(x: float, y: float) -> np.float64:
    """Beta function computed in log space to avoid overflow."""
    with np.errstate(over="ignore", invalid="ignore"):
        return np.exp(log_gamma(x) + log_gamma(y) - log_gamma(np.float64(x) + y))


def log_factorial(n: float) -> np.float64:
    return log_gamma(np.float64(n) + 1.0)


def log_choose(n: float, k: float) -> np.float64:
    """Log of the binomial coefficient ``C(n, k)``."""
    n = np.float64(n)
    k = np.float64(k)
    return log_factorial(n) - log_factorial(k) - log_factorial(n - k)


def normal_cdf(x: np.ndarray | float, mean: float, sd: float) -> np.ndarray:
    """CDF of ``N(mean, sd**2)`` through the Gauss error function."""
    arr = np.asarray(x, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return 0.5 * (1.0 + erf((arr - mean) / (sd * np.sqrt(2.0))))


__all__ = [
    "LANCZOS_G",
    "LANCZOS_COEFFICIENTS",
    "log_gamma",
    "gamma",
    "beta",
    "log_factorial",
    "log_choose",
    "normal_cdf",
]
