"""Core dataclasses and shared type aliases for cltlab modules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, TypeAlias

import numpy as np
import pandas as pd

ArrayLike: TypeAlias = np.ndarray | Sequence[float]


@dataclass(slots=True)
class Histogram:
    """Bin edges and counts; ``len(breaks) == len(counts) + 1`` when non-empty."""

    breaks: np.ndarray
    counts: np.ndarray

    @property
    def total(self) -> int:
        return int(np.sum(self.counts))


@dataclass(slots=True, frozen=True)
class SampleStatistics:
    """Descriptive summary of one data snapshot."""

    count: int
    mean: float
    variance: float
    sd: float
    median: float
    skewness: float
    kurtosis: float
    range: float
    iqr: float
    ks: float
    kl: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(slots=True)
class SimulationResult:
    """Outputs of one sampling-distribution experiment."""

    distribution: str
    parameters: dict[str, Any]
    statistic: str
    population: np.ndarray
    samples: np.ndarray
    values: np.ndarray
    population_summary: SampleStatistics
    sampling_summary: SampleStatistics
    diagnostics: dict[str, Any] = field(default_factory=dict)

    @property
    def sample_size(self) -> int:
        return int(self.samples.shape[1]) if self.samples.ndim == 2 else 0

    @property
    def standard_error(self) -> float:
        """Population SD over the square root of the sample size."""
        if self.sample_size == 0:
            return 0.0
        return float(self.population_summary.sd / np.sqrt(self.sample_size))

    def to_frame(self) -> pd.DataFrame:
        """One row per sub-sample with its statistic value."""
        return pd.DataFrame(
            {
                "sample": np.arange(self.values.size),
                self.statistic: self.values,
            }
        )

    def summary_frame(self) -> pd.DataFrame:
        """Population and sampling-distribution summaries side by side."""
        records = [
            {"source": "population", **self.population_summary.as_dict()},
            {"source": f"sample {self.statistic}", **self.sampling_summary.as_dict()},
        ]
        return pd.DataFrame.from_records(records).set_index("source")


__all__ = [
    "ArrayLike",
    "Histogram",
    "SampleStatistics",
    "SimulationResult",
]
