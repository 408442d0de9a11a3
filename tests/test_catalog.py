import numpy as np
import pytest
from scipy.integrate import quad

from cltlab.distributions import get_distribution, list_distributions
from cltlab.sampling import sample_distribution

INF = np.inf

CONTINUOUS_SUPPORT = {
    "normal": [(-INF, INF)],
    "uniform": [(0.0, 1.0)],
    "exponential": [(0.0, INF)],
    "cauchy": [(-INF, 0.0), (0.0, INF)],
    "triangular": [(0.0, 0.5), (0.5, 1.0)],
    "laplace": [(-INF, 0.0), (0.0, INF)],
    "lognormal": [(0.0, 1.0), (1.0, INF)],
    "gamma": [(0.0, INF)],
    "weibull": [(0.0, 1.0), (1.0, INF)],
    "beta": [(0.0, 1.0)],
    "pareto": [(1.0, INF)],
    "rayleigh": [(0.0, INF)],
    "gumbel": [(-INF, INF)],
    "logistic": [(-INF, INF)],
    "chi": [(0.0, INF)],
    "inverse_gaussian": [(0.0, 1.0), (1.0, INF)],
    "maxwell_boltzmann": [(0.0, INF)],
    "chi_squared": [(0.0, 1.0), (1.0, INF)],
    "student_t": [(-INF, INF)],
    "f": [(0.0, 1.0), (1.0, INF)],
}

DISCRETE_SUPPORT = {
    "bernoulli": range(0, 2),
    "binomial": range(0, 11),
    "poisson": range(0, 120),
    "geometric": range(0, 400),
    "negative_binomial": range(0, 400),
    "hypergeometric": range(0, 11),
    "logarithmic": range(1, 200),
    "zipf": range(1, 21),
    "discrete_uniform": range(1, 7),
}


def test_every_density_family_is_covered() -> None:
    with_pdf = {name for name in list_distributions() if get_distribution(name).has_pdf}
    assert with_pdf == set(CONTINUOUS_SUPPORT) | set(DISCRETE_SUPPORT)


@pytest.mark.parametrize("name", sorted(CONTINUOUS_SUPPORT))
def test_continuous_pdf_integrates_to_one(name: str) -> None:
    dist = get_distribution(name)
    total = sum(
        quad(lambda x: float(dist.pdf(x)), low, high, limit=200)[0]
        for low, high in CONTINUOUS_SUPPORT[name]
    )
    assert total == pytest.approx(1.0, abs=1e-4)


@pytest.mark.parametrize("name", sorted(DISCRETE_SUPPORT))
def test_discrete_pmf_sums_to_one(name: str) -> None:
    dist = get_distribution(name)
    total = sum(float(dist.pdf(k)) for k in DISCRETE_SUPPORT[name])
    assert total == pytest.approx(1.0, abs=1e-9)


@pytest.mark.parametrize(
    "name",
    ["exponential", "gamma", "weibull", "rayleigh", "chi", "maxwell_boltzmann", "chi_squared"],
)
def test_positive_families_vanish_below_zero(name: str) -> None:
    assert get_distribution(name).pdf(-1.0) == 0.0


@pytest.mark.parametrize("name", sorted(DISCRETE_SUPPORT))
def test_discrete_mass_is_zero_off_integers(name: str) -> None:
    dist = get_distribution(name)
    assert dist.pdf(2.5) == 0.0
    assert dist.pdf(-3.0) == 0.0


def test_pdf_reference_values() -> None:
    assert get_distribution("normal").pdf(0.0) == pytest.approx(1.0 / np.sqrt(2.0 * np.pi))
    assert get_distribution("uniform").pdf(0.5, {"a": 0.0, "b": 4.0}) == pytest.approx(0.25)
    assert get_distribution("binomial").pdf(5.0) == pytest.approx(252.0 / 1024.0)
    assert get_distribution("poisson").pdf(0.0, {"lambda": 2.0}) == pytest.approx(np.exp(-2.0))


def test_normal_sample_moments() -> None:
    draws = sample_distribution(
        "normal", {"mean": 2.0, "sd": 3.0}, 20_000, random_state=np.random.default_rng(7)
    )
    assert draws.mean() == pytest.approx(2.0, abs=0.1)
    assert draws.std(ddof=1) == pytest.approx(3.0, abs=0.1)


@pytest.mark.parametrize("seed", [0, 11, 2024])
def test_normal_moments_from_five_thousand_draws(seed: int) -> None:
    draws = sample_distribution("normal", {"mean": 2.0, "sd": 3.0}, 5_000, random_state=seed)
    assert abs(draws.mean() - 2.0) <= 0.2
    assert abs(draws.std(ddof=1) - 3.0) <= 0.3


def test_skewed_binomial_mass() -> None:
    dist = get_distribution("binomial")
    params = {"n": 10, "p": 0.3}
    total = sum(float(dist.pdf(k, params)) for k in range(11))
    assert total == pytest.approx(1.0, abs=1e-6)
    assert dist.pdf(3, params) == pytest.approx(0.2668279320, rel=1e-8)
    for x in (2.5, 11.0, -1.0, 0.3):
        assert dist.pdf(x, params) == 0.0


@pytest.mark.parametrize(
    "name,params,expected_mean",
    [
        ("exponential", {"lambda": 2.0}, 0.5),
        ("gamma", {"shape": 2.0, "scale": 1.5}, 3.0),
        ("gamma", {"shape": 0.5, "scale": 1.0}, 0.5),
        ("beta", {"alpha": 2.0, "beta": 6.0}, 0.25),
        ("poisson", {"lambda": 4.0}, 4.0),
        ("geometric", {"p": 0.3}, 0.7 / 0.3),
        ("negative_binomial", {"r": 3.0, "p": 0.5}, 3.0),
        ("hypergeometric", {"N": 50.0, "K": 10.0, "n": 10.0}, 2.0),
        ("discrete_uniform", {"a": 1.0, "b": 6.0}, 3.5),
        ("chi_squared", {"df": 4.0}, 4.0),
        ("dirichlet", {"alpha": 1.0, "k": 4.0}, 0.25),
        ("wishart", {"df": 3.0, "scale": 2.0}, 6.0),
    ],
)
def test_sample_means_converge(name: str, params: dict[str, float], expected_mean: float) -> None:
    draws = sample_distribution(name, params, 8_000, random_state=np.random.default_rng(11))
    assert np.all(np.isfinite(draws))
    assert draws.mean() == pytest.approx(expected_mean, rel=0.06)


def test_binomial_draws_are_integers_within_trials() -> None:
    draws = sample_distribution(
        "binomial", {"n": 10.0, "p": 0.3}, 2_000, random_state=np.random.default_rng(3)
    )
    assert np.all(draws == np.round(draws))
    assert draws.min() >= 0
    assert draws.max() <= 10


def test_bounded_families_stay_in_support() -> None:
    rng = np.random.default_rng(5)
    uniform = sample_distribution("uniform", {"a": -2.0, "b": 3.0}, 2_000, random_state=rng)
    assert np.all((uniform > -2.0) & (uniform < 3.0))
    beta = sample_distribution("beta", None, 2_000, random_state=rng)
    assert np.all((beta > 0.0) & (beta < 1.0))
    triangular = sample_distribution("triangular", None, 2_000, random_state=rng)
    assert np.all((triangular >= 0.0) & (triangular <= 1.0))
    pareto = sample_distribution("pareto", {"scale": 2.0}, 2_000, random_state=rng)
    assert np.all(pareto >= 2.0)
    zipf = sample_distribution("zipf", None, 2_000, random_state=rng)
    assert set(np.unique(zipf)) <= set(range(1, 21))


def test_seeded_generation_is_reproducible() -> None:
    first = sample_distribution("student_t", None, 50, random_state=42)
    second = sample_distribution("student_t", None, 50, random_state=42)
    np.testing.assert_array_equal(first, second)


def test_generate_uses_defaults_for_missing_parameters() -> None:
    value = get_distribution("normal").generate(random_state=np.random.default_rng(0))
    assert np.isfinite(value)


def test_degenerate_parameters_yield_nan_without_raising() -> None:
    rng = np.random.default_rng(1)
    assert np.isnan(get_distribution("normal").generate({"sd": float("nan")}, rng))
    assert np.isnan(get_distribution("poisson").generate({"lambda": float("inf")}, rng))
    assert np.isnan(get_distribution("binomial").generate({"n": float("nan")}, rng))


def test_sample_distribution_validates_first() -> None:
    with pytest.raises(ValueError):
        sample_distribution("exponential", {"lambda": -1.0}, 10, random_state=0)
    with pytest.raises(KeyError):
        sample_distribution("nope", None, 10, random_state=0)
