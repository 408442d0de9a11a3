"""Discrete families of the catalog.

Every mass function returns exactly zero off the integer support.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from ..special import log_choose, log_factorial, log_gamma
from .base import Distribution, ParamSpec, open_uniform

ZERO = np.float64(0.0)
NAN = np.float64(np.nan)

Params = Mapping[str, Any]


def _on_support(x: np.float64, lower: float, upper: float = np.inf) -> bool:
    return bool(np.isfinite(x) and float(x).is_integer() and lower <= x <= upper)


def _count(value: float) -> int | None:
    """Loop count for a (possibly fractional) size parameter; None when not finite."""
    if not np.isfinite(value):
        return None
    return max(int(np.ceil(value)), 0)


def _bernoulli(params: Params, rng: np.random.Generator) -> np.float64:
    return np.float64(1.0 if open_uniform(rng) < params["p"] else 0.0)


def _bernoulli_pmf(x: np.float64, params: Params) -> np.float64:
    p = params["p"]
    if x == 0:
        return 1.0 - p
    if x == 1:
        return p
    return ZERO


def _binomial(params: Params, rng: np.random.Generator) -> np.float64:
    trials = _count(params["n"])
    if trials is None:
        return NAN
    p = params["p"]
    return np.float64(sum(1 for _ in range(trials) if open_uniform(rng) < p))


def _binomial_pmf(x: np.float64, params: Params) -> np.float64:
    n, p = params["n"], params["p"]
    if not _on_support(x, 0, n):
        return ZERO
    return np.exp(log_choose(n, x)) * np.power(p, x) * np.power(1.0 - p, n - x)


def _poisson(params: Params, rng: np.random.Generator) -> np.float64:
    lam = params["lambda"]
    if not np.isfinite(lam):
        return NAN
    # Knuth: multiply uniforms until the product drops below e^-lambda
    limit = np.exp(-lam)
    k = 0
    product = 1.0
    while True:
        k += 1
        product *= open_uniform(rng)
        if product <= limit:
            break
    return np.float64(k - 1)


def _poisson_pmf(x: np.float64, params: Params) -> np.float64:
    lam = params["lambda"]
    if not _on_support(x, 0):
        return ZERO
    if lam == 0:
        return np.float64(1.0 if x == 0 else 0.0)
    return np.exp(x * np.log(lam) - lam - log_factorial(x))


def _geometric_draw(p: float, rng: np.random.Generator) -> np.float64:
    return np.floor(np.log(open_uniform(rng)) / np.log1p(-p))


def _geometric(params: Params, rng: np.random.Generator) -> np.float64:
    return _geometric_draw(params["p"], rng)


def _geometric_pmf(x: np.float64, params: Params) -> np.float64:
    p = params["p"]
    if not _on_support(x, 0):
        return ZERO
    return p * np.power(1.0 - p, x)


def _negative_binomial(params: Params, rng: np.random.Generator) -> np.float64:
    successes = _count(params["r"])
    if successes is None:
        return NAN
    p = params["p"]
    total = ZERO
    for _ in range(successes):
        total += _geometric_draw(p, rng)
    return total


def _negative_binomial_pmf(x: np.float64, params: Params) -> np.float64:
    r, p = params["r"], params["p"]
    if not _on_support(x, 0):
        return ZERO
    coefficient = np.exp(log_gamma(x + r) - log_factorial(x) - log_gamma(r))
    return coefficient * np.power(p, r) * np.power(1.0 - p, x)


def _hypergeometric(params: Params, rng: np.random.Generator) -> np.float64:
    population = _count(params["N"])
    marked = _count(params["K"])
    draws = _count(params["n"])
    if population is None or marked is None or draws is None:
        return NAN
    successes = 0
    for _ in range(min(draws, population)):
        if open_uniform(rng) < marked / population:
            successes += 1
            marked -= 1
        population -= 1
    return np.float64(successes)


def _hypergeometric_pmf(x: np.float64, params: Params) -> np.float64:
    population, marked, draws = params["N"], params["K"], params["n"]
    lower = max(0.0, draws - (population - marked))
    upper = min(marked, draws)
    if not _on_support(x, lower, upper):
        return ZERO
    return np.exp(
        log_choose(marked, x)
        + log_choose(population - marked, draws - x)
        - log_choose(population, draws)
    )


def _hypergeometric_constraint(params: Params) -> str | None:
    if params["K"] > params["N"]:
        return "marked items 'K' cannot exceed the population 'N'."
    if params["n"] > params["N"]:
        return "draws 'n' cannot exceed the population 'N'."
    return None


def _logarithmic(params: Params, rng: np.random.Generator) -> np.float64:
    p = params["p"]
    if not 0 < p < 1:
        return NAN
    u = open_uniform(rng)
    k = 1
    probability = -p / np.log1p(-p)
    cumulative = probability
    while u > cumulative:
        k += 1
        probability *= p * (k - 1) / k
        if cumulative + probability == cumulative:
            break
        cumulative += probability
    return np.float64(k)


def _logarithmic_pmf(x: np.float64, params: Params) -> np.float64:
    p = params["p"]
    if not _on_support(x, 1):
        return ZERO
    return -np.power(p, x) / (x * np.log1p(-p))


def _zipf_weights(s: float, size: float) -> np.ndarray:
    ranks = np.arange(1, max(int(size), 0) + 1, dtype=float)
    return np.power(ranks, -s)


def _zipf(params: Params, rng: np.random.Generator) -> np.float64:
    if not np.isfinite(params["N"]):
        return NAN
    weights = _zipf_weights(params["s"], params["N"])
    if weights.size == 0:
        return NAN
    cumulative = np.cumsum(weights)
    target = open_uniform(rng) * cumulative[-1]
    index = int(np.searchsorted(cumulative, target, side="left"))
    return np.float64(min(index, weights.size - 1) + 1)


def _zipf_pmf(x: np.float64, params: Params) -> np.float64:
    s, size = params["s"], params["N"]
    if not np.isfinite(size) or not _on_support(x, 1, np.floor(size)):
        return ZERO
    return np.power(x, -s) / _zipf_weights(s, size).sum()


def _discrete_uniform(params: Params, rng: np.random.Generator) -> np.float64:
    a, b = params["a"], params["b"]
    return a + np.floor(open_uniform(rng) * (b - a + 1.0))


def _discrete_uniform_pmf(x: np.float64, params: Params) -> np.float64:
    a, b = params["a"], params["b"]
    if not _on_support(x, a, b):
        return ZERO
    return 1.0 / (b - a + 1.0)


def _discrete_uniform_constraint(params: Params) -> str | None:
    a, b = params["a"], params["b"]
    if not (float(a).is_integer() and float(b).is_integer()):
        return "bounds 'a' and 'b' must be integers."
    if a > b:
        return "lower bound 'a' must not exceed upper bound 'b'."
    return None


def _probability(default: float) -> ParamSpec:
    return ParamSpec("Probability", "Success probability per trial", default, 0.0, 1.0, 0.01)


def _whole(label: str, description: str, default: float, minimum: float = 1.0) -> ParamSpec:
    return ParamSpec(label, description, default, minimum, 1000.0, 1.0)


DISCRETE_DISTRIBUTIONS = [
    Distribution(
        name="bernoulli",
        label="Bernoulli Distribution",
        category="discrete",
        sampler=_bernoulli,
        density=_bernoulli_pmf,
        parameters={"p": _probability(0.5)},
        notes="Single success/failure trial.",
    ),
    Distribution(
        name="binomial",
        label="Binomial Distribution",
        category="discrete",
        sampler=_binomial,
        density=_binomial_pmf,
        parameters={"n": _whole("Trials", "Number of trials", 10.0), "p": _probability(0.5)},
        notes="Counts successes over n Bernoulli trials.",
    ),
    Distribution(
        name="poisson",
        label="Poisson Distribution",
        category="discrete",
        sampler=_poisson,
        density=_poisson_pmf,
        parameters={"lambda": ParamSpec("Rate", "Expected number of events", 4.0, 0.0, 100.0, 0.1)},
        notes="Knuth's multiplication method.",
    ),
    Distribution(
        name="geometric",
        label="Geometric Distribution",
        category="discrete",
        sampler=_geometric,
        density=_geometric_pmf,
        parameters={"p": ParamSpec("Probability", "Success probability", 0.3, 1e-6, 1.0, 0.01)},
        notes="Failures before the first success.",
    ),
    Distribution(
        name="negative_binomial",
        label="Negative Binomial Distribution",
        category="discrete",
        sampler=_negative_binomial,
        density=_negative_binomial_pmf,
        parameters={
            "r": _whole("Successes", "Number of successes to wait for", 3.0),
            "p": ParamSpec("Probability", "Success probability", 0.5, 1e-6, 1.0, 0.01),
        },
        notes="Failures before the r-th success.",
    ),
    Distribution(
        name="hypergeometric",
        label="Hypergeometric Distribution",
        category="discrete",
        sampler=_hypergeometric,
        density=_hypergeometric_pmf,
        parameters={
            "N": _whole("Population", "Population size", 50.0),
            "K": _whole("Marked", "Marked items in the population", 10.0, minimum=0.0),
            "n": _whole("Draws", "Items drawn without replacement", 10.0, minimum=0.0),
        },
        constraint=_hypergeometric_constraint,
        notes="Sequential draws without replacement.",
    ),
    Distribution(
        name="logarithmic",
        label="Logarithmic Distribution",
        category="discrete",
        sampler=_logarithmic,
        density=_logarithmic_pmf,
        parameters={"p": ParamSpec("Probability", "Series parameter", 0.5, 1e-6, 0.999, 0.01)},
        notes="Logarithmic series, support k >= 1.",
    ),
    Distribution(
        name="zipf",
        label="Zipf Distribution",
        category="discrete",
        sampler=_zipf,
        density=_zipf_pmf,
        parameters={
            "s": ParamSpec("Exponent", "Power-law exponent", 1.5, 0.0, 10.0, 0.1),
            "N": _whole("Elements", "Number of ranks", 20.0),
        },
        notes="Finite Zipf law over ranks 1..N.",
    ),
    Distribution(
        name="discrete_uniform",
        label="Discrete Uniform Distribution",
        category="discrete",
        sampler=_discrete_uniform,
        density=_discrete_uniform_pmf,
        parameters={
            "a": ParamSpec("Lower Bound", "Smallest value", 1.0, -1000.0, 1000.0, 1.0),
            "b": ParamSpec("Upper Bound", "Largest value", 6.0, -1000.0, 1000.0, 1.0),
        },
        constraint=_discrete_uniform_constraint,
        notes="Every integer in [a, b] equally likely.",
    ),
]


__all__ = ["DISCRETE_DISTRIBUTIONS"]
