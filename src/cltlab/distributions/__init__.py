"""Distribution registry and the built-in catalog."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .base import (
    CATEGORIES,
    Distribution,
    ParamSpec,
    as_generator,
    clear_registry,
    get_distribution,
    list_distributions,
    load_entry_points,
    load_yaml_config,
    register_distribution,
)
from .continuous import CONTINUOUS_DISTRIBUTIONS
from .derived import SAMPLING_DISTRIBUTIONS
from .discrete import DISCRETE_DISTRIBUTIONS
from .manual import ManualDistribution
from .multivariate import MULTIVARIATE_DISTRIBUTIONS

__all__ = [
    "CATEGORIES",
    "Distribution",
    "ManualDistribution",
    "ParamSpec",
    "as_generator",
    "get_distribution",
    "list_distributions",
    "register_distribution",
    "clear_registry",
    "STANDARD_DISTRIBUTIONS",
]

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CLTLAB_DISTRIBUTIONS"

STANDARD_DISTRIBUTIONS = [
    *CONTINUOUS_DISTRIBUTIONS,
    *DISCRETE_DISTRIBUTIONS,
    *SAMPLING_DISTRIBUTIONS,
    *MULTIVARIATE_DISTRIBUTIONS,
]


def _register_builtin() -> None:
    for dist in STANDARD_DISTRIBUTIONS:
        register_distribution(dist, overwrite=True)


def _load_config_files() -> None:
    project_root = Path(__file__).resolve().parents[3]
    config_dir = project_root / "config" / "distributions"
    if config_dir.exists():
        for path in sorted(config_dir.glob("*.yaml")):
            load_yaml_config(path)

    env_paths = os.environ.get(CONFIG_ENV_VAR)
    if env_paths:
        for item in env_paths.split(os.pathsep):
            load_yaml_config(item)


_register_builtin()
load_entry_points()
_load_config_files()
logger.debug("Distribution registry ready with %d entries", len(list_distributions()))
