"""Sampling distributions built from normal and chi-squared draws."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from ..special import beta as beta_fn
from ..special import log_gamma
from .base import Distribution, ParamSpec
from .continuous import standard_normal, sum_of_squares

ZERO = np.float64(0.0)

Params = Mapping[str, Any]


def _chi_squared(params: Params, rng: np.random.Generator) -> np.float64:
    return sum_of_squares(params["df"], rng)


def _chi_squared_pdf(x: np.float64, params: Params) -> np.float64:
    df = params["df"]
    if x < 0:
        return ZERO
    half = df / 2.0
    return (
        np.power(x, half - 1.0)
        * np.exp(-x / 2.0)
        / (np.power(2.0, half) * np.exp(log_gamma(half)))
    )


def _student_t(params: Params, rng: np.random.Generator) -> np.float64:
    df = params["df"]
    z = standard_normal(rng)
    return z / np.sqrt(sum_of_squares(df, rng) / df)


def _student_t_pdf(x: np.float64, params: Params) -> np.float64:
    df = params["df"]
    log_coefficient = log_gamma((df + 1.0) / 2.0) - log_gamma(df / 2.0)
    return (
        np.exp(log_coefficient)
        / np.sqrt(df * np.pi)
        * np.power(1.0 + x * x / df, -(df + 1.0) / 2.0)
    )


def _f(params: Params, rng: np.random.Generator) -> np.float64:
    df1, df2 = params["df1"], params["df2"]
    return (sum_of_squares(df1, rng) / df1) / (sum_of_squares(df2, rng) / df2)


def _f_pdf(x: np.float64, params: Params) -> np.float64:
    df1, df2 = params["df1"], params["df2"]
    if x < 0:
        return ZERO
    a = df1 / 2.0
    b = df2 / 2.0
    return (
        np.power(df1 / df2, a)
        * np.power(x, a - 1.0)
        * np.power(1.0 + df1 * x / df2, -(a + b))
        / beta_fn(a, b)
    )


def _degrees(default: float, label: str = "Degrees of Freedom") -> ParamSpec:
    return ParamSpec(label, "Number of squared normal terms", default, 1.0, 100.0, 1.0)


SAMPLING_DISTRIBUTIONS = [
    Distribution(
        name="chi_squared",
        label="Chi-Squared Distribution",
        category="sampling",
        sampler=_chi_squared,
        density=_chi_squared_pdf,
        parameters={"df": _degrees(3.0)},
        notes="Sum of df squared standard normals.",
    ),
    Distribution(
        name="student_t",
        label="Student's t Distribution",
        category="sampling",
        sampler=_student_t,
        density=_student_t_pdf,
        parameters={"df": _degrees(5.0)},
        notes="Normal over the root of a scaled chi-squared.",
    ),
    Distribution(
        name="f",
        label="F Distribution",
        category="sampling",
        sampler=_f,
        density=_f_pdf,
        parameters={
            "df1": _degrees(5.0, "Numerator Degrees of Freedom"),
            "df2": _degrees(10.0, "Denominator Degrees of Freedom"),
        },
        notes="Ratio of two scaled chi-squared variates.",
    ),
]


__all__ = ["SAMPLING_DISTRIBUTIONS"]
