"""Top-level package exports for cltlab."""

from __future__ import annotations

from importlib import metadata

__version__ = "0.1.0"

try:
    __version__ = metadata.version("cltlab")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev fallback
    pass

from . import core as core  # noqa: F401
from . import descriptive as descriptive  # noqa: F401
from . import distributions as distributions  # noqa: F401
from .core import Histogram, SampleStatistics, SimulationResult  # noqa: F401
from .distributions import ManualDistribution, get_distribution  # noqa: F401
from .sampling import SamplingConfig, simulate  # noqa: F401

__all__ = [
    "__version__",
    "core",
    "descriptive",
    "distributions",
    "Histogram",
    "ManualDistribution",
    "SampleStatistics",
    "SamplingConfig",
    "SimulationResult",
    "get_distribution",
    "simulate",
]
