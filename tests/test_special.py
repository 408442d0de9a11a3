import math

import numpy as np
import pytest
from scipy.special import gammaln

from cltlab.special import beta, gamma, log_choose, log_factorial, log_gamma, normal_cdf


@pytest.mark.parametrize("n", [*range(1, 12), 20])
def test_gamma_matches_factorial(n: int) -> None:
    assert gamma(n) == pytest.approx(math.factorial(n - 1), rel=1e-10)
    assert np.exp(log_gamma(n)) == pytest.approx(math.factorial(n - 1), rel=1e-10)


def test_gamma_half_is_root_pi() -> None:
    assert gamma(0.5) == pytest.approx(np.sqrt(np.pi), rel=1e-12)


@pytest.mark.parametrize("z", [0.1, 0.3, 0.7, 1.4, 2.25])
def test_reflection_identity(z: float) -> None:
    assert gamma(z) * gamma(1.0 - z) == pytest.approx(np.pi / np.sin(np.pi * z), rel=1e-10)


@pytest.mark.parametrize("z", [0.01, 0.5, 1.0, 3.7, 25.0, 170.5, -0.5, -2.5])
def test_log_gamma_matches_scipy(z: float) -> None:
    assert log_gamma(z) == pytest.approx(gammaln(z), rel=1e-9, abs=1e-12)


def test_gamma_keeps_sign_for_negative_arguments() -> None:
    assert gamma(-0.5) == pytest.approx(-2.0 * np.sqrt(np.pi), rel=1e-10)
    assert gamma(-1.5) > 0


@pytest.mark.parametrize("z", [0.0, -1.0, -4.0])
def test_poles_are_nan(z: float) -> None:
    assert np.isnan(gamma(z))
    assert np.isnan(log_gamma(z))


def test_beta_and_combinatorics() -> None:
    assert beta(2.0, 3.0) == pytest.approx(1.0 / 12.0, rel=1e-10)
    assert np.exp(log_factorial(5)) == pytest.approx(120.0, rel=1e-10)
    assert np.exp(log_choose(10, 3)) == pytest.approx(120.0, rel=1e-9)


def test_normal_cdf_reference_points() -> None:
    assert normal_cdf(0.0, 0.0, 1.0) == pytest.approx(0.5)
    assert normal_cdf(1.96, 0.0, 1.0) == pytest.approx(0.9750021, rel=1e-6)
    assert normal_cdf(5.0, 5.0, 2.0) == pytest.approx(0.5)


def test_infinite_argument_overflows_to_infinity() -> None:
    assert log_gamma(np.inf) == np.inf
    assert gamma(np.inf) == np.inf
    assert np.isnan(log_gamma(np.nan))
