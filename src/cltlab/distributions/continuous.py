"""Continuous families of the catalog."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from ..special import beta as beta_fn
from ..special import log_gamma
from .base import Distribution, ParamSpec, open_uniform

SQRT_TWO_PI = np.sqrt(2.0 * np.pi)

ZERO = np.float64(0.0)

Params = Mapping[str, Any]


def standard_normal(rng: np.random.Generator) -> np.float64:
    """Box-Muller draw from N(0, 1)."""
    u1 = open_uniform(rng)
    u2 = open_uniform(rng)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def standard_gamma(shape: float, rng: np.random.Generator) -> np.float64:
    """Marsaglia-Tsang draw from Gamma(shape, 1).

    Shapes below one sample Gamma(shape + 1) and apply the ``U ** (1 / shape)``
    boost.
    """
    boost = shape < 1
    a = shape + 1.0 if boost else shape
    d = a - 1.0 / 3.0
    c = 1.0 / np.sqrt(9.0 * d)
    while True:
        x = standard_normal(rng)
        v = 1.0 + c * x
        if v <= 0:
            continue
        v = v * v * v
        u = open_uniform(rng)
        if u <= 1.0 - 0.331 * x**4 or np.log(u) <= 0.5 * x * x + d * (1.0 - v + np.log(v)):
            break
    value = d * v
    if boost:
        value *= np.power(open_uniform(rng), 1.0 / shape)
    return value


def sum_of_squares(df: float, rng: np.random.Generator) -> np.float64:
    """Sum of ``ceil(df)`` squared standard normal draws."""
    if not np.isfinite(df):
        return np.float64(np.nan)
    total = ZERO
    for _ in range(max(int(np.ceil(df)), 0)):
        z = standard_normal(rng)
        total += z * z
    return total


# --- samplers -----------------------------------------------------------------


def _normal(params: Params, rng: np.random.Generator) -> np.float64:
    return params["mean"] + params["sd"] * standard_normal(rng)


def _normal_pdf(x: np.float64, params: Params) -> np.float64:
    mean, sd = params["mean"], params["sd"]
    return np.exp(-0.5 * ((x - mean) / sd) ** 2) / (sd * SQRT_TWO_PI)


def _uniform(params: Params, rng: np.random.Generator) -> np.float64:
    a, b = params["a"], params["b"]
    return a + open_uniform(rng) * (b - a)


def _uniform_pdf(x: np.float64, params: Params) -> np.float64:
    a, b = params["a"], params["b"]
    if a <= x <= b:
        return 1.0 / (b - a)
    return ZERO


def _exponential(params: Params, rng: np.random.Generator) -> np.float64:
    return -np.log(open_uniform(rng)) / params["lambda"]


def _exponential_pdf(x: np.float64, params: Params) -> np.float64:
    lam = params["lambda"]
    if x < 0:
        return ZERO
    return lam * np.exp(-lam * x)


def _cauchy(params: Params, rng: np.random.Generator) -> np.float64:
    return params["location"] + params["scale"] * np.tan(np.pi * (open_uniform(rng) - 0.5))


def _cauchy_pdf(x: np.float64, params: Params) -> np.float64:
    location, scale = params["location"], params["scale"]
    return 1.0 / (np.pi * scale * (1.0 + ((x - location) / scale) ** 2))


def _triangular(params: Params, rng: np.random.Generator) -> np.float64:
    a, b, c = params["a"], params["b"], params["c"]
    u = open_uniform(rng)
    if u < (c - a) / (b - a):
        return a + np.sqrt(u * (b - a) * (c - a))
    return b - np.sqrt((1.0 - u) * (b - a) * (b - c))


def _triangular_pdf(x: np.float64, params: Params) -> np.float64:
    a, b, c = params["a"], params["b"], params["c"]
    if x < a or x > b:
        return ZERO
    if x == c:
        return 2.0 / (b - a)
    if x < c:
        return 2.0 * (x - a) / ((b - a) * (c - a))
    return 2.0 * (b - x) / ((b - a) * (b - c))


def _triangular_constraint(params: Params) -> str | None:
    a, b, c = params["a"], params["b"], params["c"]
    if not a < b:
        return "lower bound 'a' must be below upper bound 'b'."
    if not a <= c <= b:
        return "mode 'c' must lie within [a, b]."
    return None


def _laplace(params: Params, rng: np.random.Generator) -> np.float64:
    u = open_uniform(rng) - 0.5
    return params["location"] - params["scale"] * np.sign(u) * np.log(1.0 - 2.0 * np.abs(u))


def _laplace_pdf(x: np.float64, params: Params) -> np.float64:
    location, scale = params["location"], params["scale"]
    return np.exp(-np.abs(x - location) / scale) / (2.0 * scale)


def _lognormal(params: Params, rng: np.random.Generator) -> np.float64:
    return np.exp(params["mu"] + params["sigma"] * standard_normal(rng))


def _lognormal_pdf(x: np.float64, params: Params) -> np.float64:
    mu, sigma = params["mu"], params["sigma"]
    if x <= 0:
        return ZERO
    return np.exp(-0.5 * ((np.log(x) - mu) / sigma) ** 2) / (x * sigma * SQRT_TWO_PI)


def _gamma(params: Params, rng: np.random.Generator) -> np.float64:
    return params["scale"] * standard_gamma(params["shape"], rng)


def _gamma_pdf(x: np.float64, params: Params) -> np.float64:
    shape, scale = params["shape"], params["scale"]
    if x <= 0:
        return ZERO
    return np.exp(
        (shape - 1.0) * np.log(x) - x / scale - log_gamma(shape) - shape * np.log(scale)
    )


def _weibull(params: Params, rng: np.random.Generator) -> np.float64:
    return params["scale"] * np.power(-np.log(open_uniform(rng)), 1.0 / params["shape"])


def _weibull_pdf(x: np.float64, params: Params) -> np.float64:
    shape, scale = params["shape"], params["scale"]
    if x < 0:
        return ZERO
    ratio = x / scale
    return (shape / scale) * np.power(ratio, shape - 1.0) * np.exp(-np.power(ratio, shape))


def _beta(params: Params, rng: np.random.Generator) -> np.float64:
    x = standard_gamma(params["alpha"], rng)
    y = standard_gamma(params["beta"], rng)
    return x / (x + y)


def _beta_pdf(x: np.float64, params: Params) -> np.float64:
    alpha, beta = params["alpha"], params["beta"]
    if x < 0 or x > 1:
        return ZERO
    return np.power(x, alpha - 1.0) * np.power(1.0 - x, beta - 1.0) / beta_fn(alpha, beta)


def _pareto(params: Params, rng: np.random.Generator) -> np.float64:
    return params["scale"] / np.power(open_uniform(rng), 1.0 / params["shape"])


def _pareto_pdf(x: np.float64, params: Params) -> np.float64:
    scale, shape = params["scale"], params["shape"]
    if x < scale:
        return ZERO
    return shape * np.power(scale, shape) / np.power(x, shape + 1.0)


def _rayleigh(params: Params, rng: np.random.Generator) -> np.float64:
    return params["scale"] * np.sqrt(-2.0 * np.log(open_uniform(rng)))


def _rayleigh_pdf(x: np.float64, params: Params) -> np.float64:
    scale = params["scale"]
    if x < 0:
        return ZERO
    return x / (scale * scale) * np.exp(-(x * x) / (2.0 * scale * scale))


def _gumbel(params: Params, rng: np.random.Generator) -> np.float64:
    return params["location"] - params["scale"] * np.log(-np.log(open_uniform(rng)))


def _gumbel_pdf(x: np.float64, params: Params) -> np.float64:
    location, scale = params["location"], params["scale"]
    z = (x - location) / scale
    return np.exp(-(z + np.exp(-z))) / scale


def _logistic(params: Params, rng: np.random.Generator) -> np.float64:
    u = open_uniform(rng)
    return params["location"] + params["scale"] * np.log(u / (1.0 - u))


def _logistic_pdf(x: np.float64, params: Params) -> np.float64:
    location, scale = params["location"], params["scale"]
    # symmetric in z; |z| keeps exp() from overflowing in the left tail
    decay = np.exp(-np.abs((x - location) / scale))
    return decay / (scale * (1.0 + decay) ** 2)


def _chi(params: Params, rng: np.random.Generator) -> np.float64:
    return np.sqrt(sum_of_squares(params["df"], rng))


def _chi_pdf(x: np.float64, params: Params) -> np.float64:
    df = params["df"]
    if x < 0:
        return ZERO
    half = df / 2.0
    return (
        np.power(2.0, 1.0 - half)
        / np.exp(log_gamma(half))
        * np.power(x, df - 1.0)
        * np.exp(-x * x / 2.0)
    )


def _inverse_gaussian(params: Params, rng: np.random.Generator) -> np.float64:
    mu, lam = params["mu"], params["lambda"]
    v = standard_normal(rng)
    y = v * v
    x = (
        mu
        + (mu * mu * y) / (2.0 * lam)
        - (mu / (2.0 * lam)) * np.sqrt(4.0 * mu * lam * y + mu * mu * y * y)
    )
    if open_uniform(rng) <= mu / (mu + x):
        return x
    return mu * mu / x


def _inverse_gaussian_pdf(x: np.float64, params: Params) -> np.float64:
    mu, lam = params["mu"], params["lambda"]
    if x <= 0:
        return ZERO
    return np.sqrt(lam / (2.0 * np.pi * x**3)) * np.exp(-lam * (x - mu) ** 2 / (2.0 * mu * mu * x))


def _maxwell_boltzmann(params: Params, rng: np.random.Generator) -> np.float64:
    return params["scale"] * np.sqrt(sum_of_squares(3, rng))


def _maxwell_boltzmann_pdf(x: np.float64, params: Params) -> np.float64:
    scale = params["scale"]
    if x < 0:
        return ZERO
    return np.sqrt(2.0 / np.pi) * x * x / scale**3 * np.exp(-x * x / (2.0 * scale * scale))


def _positive(label: str, description: str, default: float, maximum: float = 100.0) -> ParamSpec:
    return ParamSpec(label, description, default, min=1e-6, max=maximum, step=0.1)


def _real(label: str, description: str, default: float) -> ParamSpec:
    return ParamSpec(label, description, default, min=-100.0, max=100.0, step=0.1)


def _uniform_constraint(params: Params) -> str | None:
    if not params["a"] < params["b"]:
        return "lower bound 'a' must be below upper bound 'b'."
    return None


LOCATION = _real("Location", "Centre of the distribution", 0.0)
SCALE = _positive("Scale", "Spread of the distribution", 1.0)

CONTINUOUS_DISTRIBUTIONS = [
    Distribution(
        name="normal",
        label="Normal Distribution",
        category="continuous",
        sampler=_normal,
        density=_normal_pdf,
        parameters={
            "mean": _real("Mean", "Centre of the bell curve", 0.0),
            "sd": _positive("Standard Deviation", "Spread around the mean", 1.0),
        },
        notes="Box-Muller transform.",
    ),
    Distribution(
        name="uniform",
        label="Uniform Distribution",
        category="continuous",
        sampler=_uniform,
        density=_uniform_pdf,
        parameters={
            "a": _real("Lower Bound", "Smallest attainable value", 0.0),
            "b": _real("Upper Bound", "Largest attainable value", 1.0),
        },
        constraint=_uniform_constraint,
        notes="Flat density on [a, b].",
    ),
    Distribution(
        name="exponential",
        label="Exponential Distribution",
        category="continuous",
        sampler=_exponential,
        density=_exponential_pdf,
        parameters={"lambda": _positive("Rate", "Events per unit time", 1.0)},
        notes="Inverse transform of -ln(U) / lambda.",
    ),
    Distribution(
        name="cauchy",
        label="Cauchy Distribution",
        category="continuous",
        sampler=_cauchy,
        density=_cauchy_pdf,
        parameters={"location": LOCATION, "scale": SCALE},
        notes="Heavy tails; the sample mean never settles.",
    ),
    Distribution(
        name="triangular",
        label="Triangular Distribution",
        category="continuous",
        sampler=_triangular,
        density=_triangular_pdf,
        parameters={
            "a": _real("Lower Limit", "Left end of the support", 0.0),
            "b": _real("Upper Limit", "Right end of the support", 1.0),
            "c": _real("Mode", "Peak of the triangle", 0.5),
        },
        constraint=_triangular_constraint,
        notes="Piecewise inverse CDF split at (c - a) / (b - a).",
    ),
    Distribution(
        name="laplace",
        label="Laplace Distribution",
        category="continuous",
        sampler=_laplace,
        density=_laplace_pdf,
        parameters={"location": LOCATION, "scale": SCALE},
        notes="Double exponential.",
    ),
    Distribution(
        name="lognormal",
        label="Log-Normal Distribution",
        category="continuous",
        sampler=_lognormal,
        density=_lognormal_pdf,
        parameters={
            "mu": _real("Log Mean", "Mean of the underlying normal", 0.0),
            "sigma": _positive("Log SD", "SD of the underlying normal", 1.0, maximum=10.0),
        },
        notes="exp of a normal variate.",
    ),
    Distribution(
        name="gamma",
        label="Gamma Distribution",
        category="continuous",
        sampler=_gamma,
        density=_gamma_pdf,
        parameters={
            "shape": _positive("Shape", "Shape parameter (k)", 2.0),
            "scale": _positive("Scale", "Scale parameter (theta)", 1.0),
        },
        notes="Marsaglia-Tsang with a boost for shape < 1.",
    ),
    Distribution(
        name="weibull",
        label="Weibull Distribution",
        category="continuous",
        sampler=_weibull,
        density=_weibull_pdf,
        parameters={
            "shape": _positive("Shape", "Shape parameter (k)", 1.5),
            "scale": _positive("Scale", "Scale parameter (lambda)", 1.0),
        },
        notes="Inverse transform.",
    ),
    Distribution(
        name="beta",
        label="Beta Distribution",
        category="continuous",
        sampler=_beta,
        density=_beta_pdf,
        parameters={
            "alpha": _positive("Alpha", "First shape parameter", 2.0),
            "beta": _positive("Beta", "Second shape parameter", 2.0),
        },
        notes="Ratio of two gamma variates.",
    ),
    Distribution(
        name="pareto",
        label="Pareto Distribution",
        category="continuous",
        sampler=_pareto,
        density=_pareto_pdf,
        parameters={
            "scale": _positive("Scale", "Minimum attainable value", 1.0),
            "shape": _positive("Shape", "Tail index", 3.0),
        },
        notes="Power-law tail; variance is infinite for shape <= 2.",
    ),
    Distribution(
        name="rayleigh",
        label="Rayleigh Distribution",
        category="continuous",
        sampler=_rayleigh,
        density=_rayleigh_pdf,
        parameters={"scale": SCALE},
        notes="Magnitude of a 2-D isotropic normal vector.",
    ),
    Distribution(
        name="gumbel",
        label="Gumbel Distribution",
        category="continuous",
        sampler=_gumbel,
        density=_gumbel_pdf,
        parameters={"location": LOCATION, "scale": SCALE},
        notes="Extreme value type I.",
    ),
    Distribution(
        name="logistic",
        label="Logistic Distribution",
        category="continuous",
        sampler=_logistic,
        density=_logistic_pdf,
        parameters={"location": LOCATION, "scale": SCALE},
    ),
    Distribution(
        name="chi",
        label="Chi Distribution",
        category="continuous",
        sampler=_chi,
        density=_chi_pdf,
        parameters={
            "df": ParamSpec("Degrees of Freedom", "Number of squared normals", 3.0, 1.0, 50.0, 1.0)
        },
        notes="Square root of a chi-squared variate.",
    ),
    Distribution(
        name="inverse_gaussian",
        label="Inverse Gaussian Distribution",
        category="continuous",
        sampler=_inverse_gaussian,
        density=_inverse_gaussian_pdf,
        parameters={
            "mu": _positive("Mean", "Mean of the distribution", 1.0),
            "lambda": _positive("Shape", "Shape parameter", 1.0),
        },
        notes="Michael-Schucany-Haas transformation.",
    ),
    Distribution(
        name="maxwell_boltzmann",
        label="Maxwell-Boltzmann Distribution",
        category="continuous",
        sampler=_maxwell_boltzmann,
        density=_maxwell_boltzmann_pdf,
        parameters={"scale": SCALE},
        notes="Speed of a particle with normal velocity components.",
    ),
]


__all__ = [
    "CONTINUOUS_DISTRIBUTIONS",
    "standard_normal",
    "standard_gamma",
    "sum_of_squares",
]
