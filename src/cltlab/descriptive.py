"""Descriptive statistics over numeric sequences.

Every estimator returns 0 for input too small to support it so callers can
always render a baseline.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from .core import ArrayLike, Histogram, SampleStatistics
from .special import normal_cdf

STURGES_FACTOR = 3.322
KL_DEFAULT_BINS = 20
_DENSITY_FLOOR = 1e-300


def _as_array(data: ArrayLike) -> np.ndarray:
    return np.asarray(data, dtype=float).ravel()


def mean(data: ArrayLike) -> float:
    arr = _as_array(data)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))


def variance(data: ArrayLike, use_biased: bool = False) -> float:
    """Sum of squared deviations over ``n - 1`` (or ``n`` when ``use_biased``)."""
    arr = _as_array(data)
    if arr.size < 2:
        return 0.0
    return float(np.var(arr, ddof=0 if use_biased else 1))


def sd(data: ArrayLike, use_biased: bool = False) -> float:
    return float(np.sqrt(variance(data, use_biased)))


def median(data: ArrayLike) -> float:
    arr = _as_array(data)
    if arr.size == 0:
        return 0.0
    return float(np.median(arr))


def skewness(data: ArrayLike) -> float:
    """Adjusted Fisher-Pearson skewness, ``n / ((n-1)(n-2)) * sum(z**3)``."""
    arr = _as_array(data)
    n = arr.size
    if n < 3:
        return 0.0
    spread = sd(arr)
    if spread == 0:
        return 0.0
    z = (arr - arr.mean()) / spread
    return float(n * np.sum(z**3) / ((n - 1) * (n - 2)))


def kurtosis(data: ArrayLike) -> float:
    """Bias-corrected excess kurtosis (zero for a normal population)."""
    arr = _as_array(data)
    n = arr.size
    if n < 4:
        return 0.0
    spread = sd(arr)
    if spread == 0:
        return 0.0
    z = (arr - arr.mean()) / spread
    leading = n * (n + 1) / ((n - 1) * (n - 2) * (n - 3)) * np.sum(z**4)
    correction = 3 * (n - 1) ** 2 / ((n - 2) * (n - 3))
    return float(leading - correction)


def value_range(data: ArrayLike) -> float:
    arr = _as_array(data)
    if arr.size == 0:
        return 0.0
    return float(arr.max() - arr.min())


def iqr(data: ArrayLike) -> float:
    """``Q3 - Q1`` taken at indices ``floor(0.75 n)`` and ``floor(0.25 n)``."""
    arr = np.sort(_as_array(data))
    n = arr.size
    if n < 4:
        return 0.0
    return float(arr[int(np.floor(0.75 * n))] - arr[int(np.floor(0.25 * n))])


def sturges_bins(n: int) -> int:
    return int(np.ceil(1 + STURGES_FACTOR * np.log10(n)))


def calculate_bins(data: ArrayLike, custom_bins: int | None = None) -> Histogram:
    """Equal-width histogram; Sturges' rule unless ``custom_bins`` is given.

    The maximum lands in the last bin and indices are clamped, so the counts
    always add up to ``len(data)``.
    """
    arr = _as_array(data)
    if arr.size == 0:
        return Histogram(breaks=np.array([], dtype=float), counts=np.array([], dtype=int))
    num_bins = max(int(custom_bins or sturges_bins(arr.size)), 1)
    low = float(arr.min())
    high = float(arr.max())
    width = (high - low) / num_bins
    breaks = low + width * np.arange(num_bins + 1)

    indices = np.full(arr.size, num_bins - 1, dtype=int)
    interior = arr != high
    if width > 0:
        indices[interior] = np.floor((arr[interior] - low) / width).astype(int)
    indices = np.clip(indices, 0, num_bins - 1)
    counts = np.bincount(indices, minlength=num_bins)
    return Histogram(breaks=breaks, counts=counts)


def ks_distance(data: ArrayLike, cdf: Callable[[np.ndarray], np.ndarray]) -> float:
    """Largest gap between the empirical CDF of ``data`` and ``cdf``."""
    arr = np.sort(_as_array(data))
    n = arr.size
    if n == 0:
        return 0.0
    fitted = np.asarray(cdf(arr), dtype=float)
    ranks = np.arange(1, n + 1)
    return float(max(np.max(ranks / n - fitted), np.max(fitted - (ranks - 1) / n)))


def ks_statistic(data: ArrayLike) -> float:
    """One-sample Kolmogorov-Smirnov distance to a normal fitted to ``data``."""
    arr = _as_array(data)
    if arr.size < 3:
        return 0.0
    spread = sd(arr)
    if spread == 0:
        return 0.0
    center = float(arr.mean())
    return ks_distance(arr, lambda values: normal_cdf(values, center, spread))


def kl_divergence(data: ArrayLike, bins: int = KL_DEFAULT_BINS) -> float:
    """KL divergence of the empirical histogram from a fitted normal density.

    Empty bins are skipped; each remaining bin contributes
    ``p * ln(empirical_density / normal_density)`` at its midpoint.
    """
    arr = _as_array(data)
    n = arr.size
    if n < 3:
        return 0.0
    spread = sd(arr)
    if spread == 0:
        return 0.0
    center = float(arr.mean())
    histogram = calculate_bins(arr, bins)
    widths = np.diff(histogram.breaks)
    midpoints = (histogram.breaks[:-1] + histogram.breaks[1:]) / 2.0
    probabilities = histogram.counts / n
    occupied = probabilities > 0

    empirical = probabilities[occupied] / widths[occupied]
    reference = np.exp(-0.5 * ((midpoints[occupied] - center) / spread) ** 2) / (
        spread * np.sqrt(2.0 * np.pi)
    )
    reference = np.clip(reference, _DENSITY_FLOOR, None)
    return float(np.sum(probabilities[occupied] * np.log(empirical / reference)))


def describe(data: ArrayLike) -> SampleStatistics:
    """Recompute every summary from a snapshot of ``data``."""
    arr = _as_array(data)
    return SampleStatistics(
        count=int(arr.size),
        mean=mean(arr),
        variance=variance(arr),
        sd=sd(arr),
        median=median(arr),
        skewness=skewness(arr),
        kurtosis=kurtosis(arr),
        range=value_range(arr),
        iqr=iqr(arr),
        ks=ks_statistic(arr),
        kl=kl_divergence(arr),
    )


__all__ = [
    "mean",
    "variance",
    "sd",
    "median",
    "skewness",
    "kurtosis",
    "value_range",
    "iqr",
    "sturges_bins",
    "calculate_bins",
    "ks_distance",
    "ks_statistic",
    "kl_divergence",
    "describe",
]
