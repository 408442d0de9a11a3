"""Multivariate families reduced to scalar projections.

These are teaching approximations: each sampler draws the full vector or
matrix but returns a single number so it can feed the same histograms as the
univariate families. None of them define a density.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from .base import Distribution, ParamSpec
from .continuous import standard_gamma, standard_normal

Params = Mapping[str, Any]


def _multivariate_normal(params: Params, rng: np.random.Generator) -> np.float64:
    mean, sd = params["mean"], params["sd"]
    x = mean + sd * standard_normal(rng)
    y = mean + sd * standard_normal(rng)
    return np.sqrt(x * x + y * y)


def _dirichlet(params: Params, rng: np.random.Generator) -> np.float64:
    alpha = params["alpha"]
    if np.ndim(alpha) > 0:
        concentrations = [float(value) for value in alpha]
    else:
        components = params.get("k", 2)
        if not np.isfinite(components):
            return np.float64(np.nan)
        concentrations = [alpha] * max(int(components), 2)
    draws = [standard_gamma(value, rng) for value in concentrations]
    return draws[0] / sum(draws)


def _wishart(params: Params, rng: np.random.Generator) -> np.float64:
    df, scale = params["df"], params["scale"]
    if not np.isfinite(df):
        return np.float64(np.nan)
    sd = np.sqrt(scale)
    total = np.float64(0.0)
    for _ in range(max(int(np.ceil(df)), 0)):
        x = sd * standard_normal(rng)
        total += x * x
    return total


MULTIVARIATE_DISTRIBUTIONS = [
    Distribution(
        name="multivariate_normal",
        label="Multivariate Normal Distribution",
        category="multivariate",
        sampler=_multivariate_normal,
        parameters={
            "mean": ParamSpec("Mean", "Mean of each dimension", 0.0, -10.0, 10.0, 0.1),
            "sd": ParamSpec("Standard Deviation", "SD of each dimension", 1.0, 0.1, 10.0, 0.1),
        },
        notes="Euclidean norm of a 2-D normal draw.",
    ),
    Distribution(
        name="dirichlet",
        label="Dirichlet Distribution",
        category="multivariate",
        sampler=_dirichlet,
        parameters={
            "alpha": ParamSpec("Alpha", "Shared concentration parameter", 1.0, 0.1, 10.0, 0.1),
            "k": ParamSpec("Components", "Dimension of the simplex", 2.0, 2.0, 20.0, 1.0),
        },
        notes="First component of a point on the simplex.",
    ),
    Distribution(
        name="wishart",
        label="Wishart Distribution",
        category="multivariate",
        sampler=_wishart,
        parameters={
            "df": ParamSpec("Degrees of Freedom", "Degrees of freedom", 3.0, 1.0, 20.0, 1.0),
            "scale": ParamSpec("Scale", "Scale parameter", 1.0, 0.1, 10.0, 0.1),
        },
        notes="1x1 Wishart, i.e. a scaled chi-squared.",
    ),
]


__all__ = ["MULTIVARIATE_DISTRIBUTIONS"]
