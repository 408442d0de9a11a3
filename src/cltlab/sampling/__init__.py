"""Sampling utilities built on top of the cltlab distribution registry."""

from __future__ import annotations

import logging
import numbers
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from .. import descriptive
from ..core import SimulationResult
from ..distributions import Distribution, ManualDistribution, as_generator, get_distribution

__all__ = [
    "STATISTICS",
    "SamplingConfig",
    "load_sampling_config",
    "resolve_distribution",
    "sample_distribution",
    "pdf_to_cdf",
    "draw_subsamples",
    "sampling_distribution",
    "simulate",
]

logger = logging.getLogger(__name__)

Target = str | Distribution | ManualDistribution

STATISTICS: dict[str, Callable[[np.ndarray], float]] = {
    "mean": descriptive.mean,
    "median": descriptive.median,
    "variance": descriptive.variance,
    "sd": descriptive.sd,
    "skewness": descriptive.skewness,
    "kurtosis": descriptive.kurtosis,
    "range": descriptive.value_range,
    "iqr": descriptive.iqr,
}


@dataclass(slots=True)
class SamplingConfig:
    """Configuration controlling a sampling-distribution experiment."""

    population_size: int = 10_000
    sample_size: int = 30
    num_samples: int = 500
    statistic: str = "mean"
    replace: bool = True
    seed: int | None = None
    grid_points: int = 512

    def __post_init__(self) -> None:
        for name in ("population_size", "sample_size", "num_samples", "grid_points"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"'{name}' must be a positive integer.")
        if self.statistic not in STATISTICS:
            raise ValueError(
                f"Unknown statistic '{self.statistic}'. Choose from {', '.join(STATISTICS)}."
            )
        if not self.replace and self.sample_size > self.population_size:
            raise ValueError("sample_size cannot exceed population_size without replacement.")
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral)
        ):
            raise ValueError(f"'seed' must be an integer or None (got {self.seed!r}).")


def load_sampling_config(path: str | os.PathLike[str]) -> SamplingConfig:
    """Read a :class:`SamplingConfig` from the ``sampling`` section of a YAML file."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Could not parse sampling config {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"Sampling config {path} must contain a mapping.")
    section = data.get("sampling", data)
    if not isinstance(section, Mapping):
        raise ValueError(f"Sampling config {path} must contain a mapping.")
    known = {item.name for item in fields(SamplingConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown sampling option(s) in {path}: {', '.join(unknown)}.")
    logger.debug("Loaded sampling config from %s", path)
    return SamplingConfig(**section)


def resolve_distribution(target: Target) -> Distribution:
    if isinstance(target, Distribution):
        return target
    if isinstance(target, ManualDistribution):
        return target.as_distribution()
    return get_distribution(target)


def sample_distribution(
    target: Target,
    params: Mapping[str, Any] | None,
    size: int,
    *,
    random_state: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Draw ``size`` independent variates after validating ``params``."""
    rng = as_generator(random_state)
    dist = resolve_distribution(target)
    resolved = dist.validate(params)
    return np.array([dist.generate(resolved, rng) for _ in range(size)], dtype=float)


def _numeric_cdf(xs: np.ndarray, pdf_values: np.ndarray) -> np.ndarray:
    if xs.size < 2:
        return np.zeros_like(xs, dtype=float)
    diffs = np.diff(xs)
    integrand = 0.5 * (pdf_values[:-1] + pdf_values[1:]) * diffs
    cdf = np.concatenate(([0.0], np.cumsum(integrand)))
    cdf = np.clip(cdf, 0.0, None)
    total = float(cdf[-1]) if cdf.size else 1.0
    if total > 0:
        cdf /= total
    return cdf


def pdf_to_cdf(
    target: Target,
    params: Mapping[str, Any] | None,
    grid: np.ndarray,
) -> Callable[[np.ndarray], np.ndarray]:
    """Return a vectorised CDF, analytic when defined, otherwise integrated on ``grid``."""
    dist = resolve_distribution(target)
    if dist.has_cdf:
        return lambda values: np.array(
            [dist.cdf(value, params) for value in np.atleast_1d(values)], dtype=float
        )
    if not dist.has_pdf:
        raise ValueError(f"Distribution '{dist.name}' defines neither a pdf nor a cdf.")

    grid = np.asarray(grid, dtype=float)
    pdf_vals = np.nan_to_num(
        np.array([dist.pdf(x, params) for x in grid], dtype=float),
        nan=0.0,
        posinf=0.0,
        neginf=0.0,
    )
    cdf_vals = _numeric_cdf(grid, pdf_vals)

    def numeric_cdf(values: np.ndarray) -> np.ndarray:
        vals = np.asarray(values, dtype=float)
        return np.interp(vals, grid, cdf_vals, left=0.0, right=1.0)

    return numeric_cdf


def draw_subsamples(
    population: np.ndarray,
    sample_size: int,
    num_samples: int,
    *,
    replace: bool = True,
    random_state: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Return a ``(num_samples, sample_size)`` matrix of draws from ``population``."""
    rng = as_generator(random_state)
    population = np.asarray(population, dtype=float)
    if population.size == 0:
        raise ValueError("Population must contain at least one value.")
    if replace:
        return rng.choice(population, size=(num_samples, sample_size), replace=True)
    return np.stack(
        [rng.choice(population, size=sample_size, replace=False) for _ in range(num_samples)]
    )


def sampling_distribution(subsamples: np.ndarray, statistic: str = "mean") -> np.ndarray:
    """Apply ``statistic`` to every row of ``subsamples``."""
    try:
        func = STATISTICS[statistic]
    except KeyError as exc:
        raise ValueError(
            f"Unknown statistic '{statistic}'. Choose from {', '.join(STATISTICS)}."
        ) from exc
    rows = np.atleast_2d(np.asarray(subsamples, dtype=float))
    return np.array([func(row) for row in rows], dtype=float)


def simulate(
    target: Target,
    params: Mapping[str, Any] | None = None,
    config: SamplingConfig | None = None,
    *,
    random_state: np.random.Generator | int | None = None,
) -> SimulationResult:
    """Generate a population, sub-sample it and summarise a statistic's sampling distribution."""
    cfg = config or SamplingConfig()
    if random_state is None and cfg.seed is not None:
        random_state = cfg.seed
    rng = as_generator(random_state)
    dist = resolve_distribution(target)
    resolved = dist.validate(params)
    logger.debug(
        "Simulating %s: population=%d, %d samples of %d, statistic=%s",
        dist.name,
        cfg.population_size,
        cfg.num_samples,
        cfg.sample_size,
        cfg.statistic,
    )
    population = sample_distribution(dist, resolved, cfg.population_size, random_state=rng)
    subsamples = draw_subsamples(
        population,
        cfg.sample_size,
        cfg.num_samples,
        replace=cfg.replace,
        random_state=rng,
    )
    values = sampling_distribution(subsamples, cfg.statistic)
    finite = population[np.isfinite(population)]
    non_finite = int(population.size - finite.size)
    if non_finite:
        logger.warning("%d non-finite variates drawn from %s", non_finite, dist.name)
    diagnostics: dict[str, Any] = {"config": replace(cfg), "non_finite": non_finite}
    if finite.size and dist.category != "discrete" and (dist.has_cdf or dist.has_pdf):
        # central 99.8% keeps heavy tails from stretching the integration grid
        low, high = np.quantile(finite, [0.001, 0.999])
        if high > low:
            grid = np.linspace(low, high, cfg.grid_points)
            cdf = pdf_to_cdf(dist, resolved, grid)
            diagnostics["population_ks"] = descriptive.ks_distance(finite, cdf)
    return SimulationResult(
        distribution=dist.name,
        parameters={key: _plain(value) for key, value in resolved.items()},
        statistic=cfg.statistic,
        population=population,
        samples=subsamples,
        values=values,
        population_summary=descriptive.describe(population),
        sampling_summary=descriptive.describe(values),
        diagnostics=diagnostics,
    )


def _plain(value: Any) -> Any:
    return float(value) if isinstance(value, np.floating) else value
