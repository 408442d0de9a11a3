from pathlib import Path

import numpy as np
import pytest

from cltlab.distributions import get_distribution
from cltlab.sampling import (
    SamplingConfig,
    draw_subsamples,
    load_sampling_config,
    pdf_to_cdf,
    resolve_distribution,
    sample_distribution,
    sampling_distribution,
    simulate,
)


@pytest.mark.parametrize(
    "distribution,params",
    [
        ("gamma", {"shape": 3.0, "scale": 2.0}),
        ("weibull", {"shape": 2.0, "scale": 10.0}),
    ],
)
def test_pdf_to_cdf_numeric(distribution: str, params: dict[str, float]) -> None:
    grid = np.linspace(0.0, 60.0, 512)
    cdf_fn = pdf_to_cdf(distribution, params, grid)
    values = np.array([-1.0, 0.5, 5.0, 10.0, 30.0, 80.0])
    cdf_values = cdf_fn(values)
    assert np.all(np.diff(cdf_values) >= 0)  # monotonic
    assert cdf_values[0] == 0.0
    assert cdf_values[-1] == 1.0


def test_pdf_to_cdf_matches_closed_form() -> None:
    grid = np.linspace(-8.0, 8.0, 2001)
    cdf_fn = pdf_to_cdf("normal", None, grid)
    assert cdf_fn(np.array([0.0]))[0] == pytest.approx(0.5, abs=1e-4)
    assert cdf_fn(np.array([1.0]))[0] == pytest.approx(0.8413447, abs=1e-4)


def test_pdf_to_cdf_requires_a_density() -> None:
    with pytest.raises(ValueError):
        pdf_to_cdf("wishart", None, np.linspace(0.0, 1.0, 10))


def test_sample_distribution_returns_expected_shape() -> None:
    rng = np.random.default_rng(123)
    draws = sample_distribution(
        "weibull",
        {"shape": 2.5, "scale": 12.0},
        size=500,
        random_state=rng,
    )
    assert draws.shape == (500,)
    assert np.all(draws >= 0)


def test_resolve_distribution_accepts_names_and_entries() -> None:
    normal = get_distribution("normal")
    assert resolve_distribution("NORMAL") is normal
    assert resolve_distribution(normal) is normal


def test_draw_subsamples_shape_and_membership() -> None:
    population = np.arange(100, dtype=float)
    samples = draw_subsamples(population, 10, 25, random_state=0)
    assert samples.shape == (25, 10)
    assert np.isin(samples, population).all()

    without = draw_subsamples(population, 100, 3, replace=False, random_state=0)
    for row in without:
        assert sorted(row.tolist()) == population.tolist()

    with pytest.raises(ValueError):
        draw_subsamples(np.array([]), 5, 5, random_state=0)


def test_sampling_distribution_applies_statistic_per_row() -> None:
    subsamples = np.array([[1.0, 2.0, 3.0], [4.0, 4.0, 10.0]])
    assert sampling_distribution(subsamples, "mean").tolist() == pytest.approx([2.0, 6.0])
    assert sampling_distribution(subsamples, "median").tolist() == pytest.approx([2.0, 4.0])
    assert sampling_distribution(subsamples, "range").tolist() == pytest.approx([2.0, 6.0])
    with pytest.raises(ValueError, match="Unknown statistic"):
        sampling_distribution(subsamples, "mode")


def test_config_validation() -> None:
    with pytest.raises(ValueError):
        SamplingConfig(sample_size=0)
    with pytest.raises(ValueError):
        SamplingConfig(statistic="mode")
    with pytest.raises(ValueError):
        SamplingConfig(population_size=10, sample_size=20, replace=False)


def test_load_sampling_config(tmp_path: Path) -> None:
    path = tmp_path / "sampling.yaml"
    path.write_text(
        """
sampling:
  sample_size: 12
  num_samples: 40
  statistic: median
  seed: 5
""",
        encoding="utf-8",
    )
    config = load_sampling_config(path)
    assert config.sample_size == 12
    assert config.num_samples == 40
    assert config.statistic == "median"
    assert config.seed == 5
    assert config.population_size == SamplingConfig().population_size

    bad = tmp_path / "bad.yaml"
    bad.write_text("sampling:\n  samples: 3\n", encoding="utf-8")
    with pytest.raises(ValueError, match="samples"):
        load_sampling_config(bad)


@pytest.mark.parametrize(
    "content,message",
    [
        ("- 1\n- 2\n", "mapping"),
        ("sampling: [1,\n", "Could not parse"),
        ("sampling:\n  seed: abc\n", "seed"),
    ],
)
def test_load_sampling_config_rejects_malformed_files(
    tmp_path: Path, content: str, message: str
) -> None:
    path = tmp_path / "sampling.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        load_sampling_config(path)


def test_config_seed_must_be_an_integer() -> None:
    assert SamplingConfig(seed=np.int64(3)).seed == 3
    with pytest.raises(ValueError, match="seed"):
        SamplingConfig(seed=1.5)
    with pytest.raises(ValueError, match="seed"):
        SamplingConfig(seed=True)


def test_simulate_shows_central_limit_behaviour() -> None:
    config = SamplingConfig(population_size=5_000, sample_size=40, num_samples=400)
    result = simulate("exponential", {"lambda": 1.0}, config, random_state=2024)
    assert result.distribution == "exponential"
    assert result.parameters == {"lambda": 1.0}
    assert result.samples.shape == (400, 40)
    assert result.values.shape == (400,)
    assert result.sample_size == 40
    # sample means are centred on the population mean and far less skewed
    assert result.sampling_summary.mean == pytest.approx(result.population_summary.mean, abs=0.05)
    assert result.sampling_summary.sd == pytest.approx(result.standard_error, rel=0.15)
    assert abs(result.sampling_summary.skewness) < result.population_summary.skewness
    assert result.diagnostics["non_finite"] == 0
    assert result.diagnostics["population_ks"] < 0.05


def test_simulate_is_reproducible_from_config_seed() -> None:
    config = SamplingConfig(population_size=300, sample_size=5, num_samples=20, seed=17)
    first = simulate("poisson", None, config)
    second = simulate("poisson", None, config)
    np.testing.assert_array_equal(first.values, second.values)
    assert "population_ks" not in first.diagnostics


def test_simulate_frames() -> None:
    config = SamplingConfig(
        population_size=200, sample_size=5, num_samples=30, statistic="variance"
    )
    result = simulate("uniform", None, config, random_state=1)
    frame = result.to_frame()
    assert list(frame.columns) == ["sample", "variance"]
    assert len(frame) == 30
    summary = result.summary_frame()
    assert list(summary.index) == ["population", "sample variance"]
    assert "kurtosis" in summary.columns


def test_simulate_rejects_invalid_parameters() -> None:
    with pytest.raises(ValueError):
        simulate("normal", {"sd": 0.0}, SamplingConfig(population_size=10, num_samples=2))
