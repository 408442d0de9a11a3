"""Core distribution registry infrastructure."""

from __future__ import annotations

import logging
import numbers
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from importlib import import_module, metadata
from pathlib import Path
from typing import Any

import numpy as np
import yaml

Sampler = Callable[[Mapping[str, Any], np.random.Generator], float]
Density = Callable[[float, Mapping[str, Any]], float]
Constraint = Callable[[Mapping[str, Any]], "str | None"]

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "cltlab.distributions"
CATEGORIES = ("continuous", "discrete", "sampling", "multivariate")

_DEFAULT_RNG = np.random.default_rng()


def as_generator(random_state: np.random.Generator | int | None = None) -> np.random.Generator:
    """Return ``random_state`` as a Generator, falling back to the module generator."""
    if random_state is None:
        return _DEFAULT_RNG
    return np.random.default_rng(random_state)


def open_uniform(rng: np.random.Generator) -> np.float64:
    """Uniform draw on the open interval (0, 1)."""
    u = rng.random()
    while u == 0.0:
        u = rng.random()
    return np.float64(u)


@dataclass(slots=True, frozen=True)
class ParamSpec:
    """Describe one distribution parameter for UIs and validation."""

    label: str
    description: str
    default: float
    min: float | None = None
    max: float | None = None
    step: float | None = None

    @classmethod
    def from_mapping(cls, key: str, raw: Mapping[str, Any]) -> ParamSpec:
        if "default" not in raw:
            raise ValueError(f"Parameter '{key}' needs a default value.")
        return cls(
            label=str(raw.get("label", key)),
            description=str(raw.get("description", "")),
            default=float(raw["default"]),
            min=None if raw.get("min") is None else float(raw["min"]),
            max=None if raw.get("max") is None else float(raw["max"]),
            step=None if raw.get("step") is None else float(raw["step"]),
        )


@dataclass(slots=True)
class Distribution:
    """A named family with a variate sampler and optional density/CDF.

    ``sampler``, ``density`` and ``cumulative`` receive fully resolved
    parameters; use :meth:`generate`, :meth:`pdf` and :meth:`cdf`, which fill
    in declared defaults first. Nothing here validates parameter values:
    degenerate inputs come back as NaN or infinity. Call :meth:`validate`
    beforehand when that matters.
    """

    name: str
    label: str
    category: str
    sampler: Sampler
    parameters: dict[str, ParamSpec] = field(default_factory=dict)
    density: Density | None = None
    cumulative: Density | None = None
    constraint: Constraint | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.category not in CATEGORIES:
            raise ValueError(
                f"Unknown category '{self.category}' for '{self.name}'; "
                f"expected one of {', '.join(CATEGORIES)}."
            )

    @property
    def has_pdf(self) -> bool:
        return self.density is not None

    @property
    def has_cdf(self) -> bool:
        return self.cumulative is not None

    def defaults(self) -> dict[str, float]:
        return {key: spec.default for key, spec in self.parameters.items()}

    def resolve(self, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Merge ``params`` over the declared defaults."""
        resolved: dict[str, Any] = dict(self.defaults())
        if params:
            resolved.update(params)
        return {
            key: np.float64(value) if isinstance(value, numbers.Real) else value
            for key, value in resolved.items()
        }

    def validate(self, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Resolve ``params`` and check them against the declared ranges."""
        unknown = sorted(set(params or {}) - set(self.parameters))
        if unknown:
            raise ValueError(
                f"Unknown parameter(s) for '{self.name}': {', '.join(unknown)}. "
                f"Expected: {', '.join(self.parameters) or 'none'}."
            )
        resolved = self.resolve(params)
        for key, spec in self.parameters.items():
            value = resolved[key]
            if not isinstance(value, numbers.Real):
                continue
            if not np.isfinite(value):
                raise ValueError(f"Parameter '{key}' of '{self.name}' must be finite.")
            if spec.min is not None and value < spec.min:
                raise ValueError(
                    f"Parameter '{key}' of '{self.name}' must be >= {spec.min} (got {value})."
                )
            if spec.max is not None and value > spec.max:
                raise ValueError(
                    f"Parameter '{key}' of '{self.name}' must be <= {spec.max} (got {value})."
                )
        if self.constraint is not None:
            message = self.constraint(resolved)
            if message:
                raise ValueError(f"Invalid parameters for '{self.name}': {message}")
        return resolved

    def generate(
        self,
        params: Mapping[str, Any] | None = None,
        random_state: np.random.Generator | int | None = None,
    ) -> float:
        """Draw a single variate."""
        rng = as_generator(random_state)
        with np.errstate(all="ignore"):
            return self.sampler(self.resolve(params), rng)

    def pdf(self, x: float, params: Mapping[str, Any] | None = None) -> float:
        if self.density is None:
            raise NotImplementedError(f"Distribution '{self.name}' does not define a pdf.")
        with np.errstate(all="ignore"):
            return self.density(np.float64(x), self.resolve(params))

    def cdf(self, x: float, params: Mapping[str, Any] | None = None) -> float:
        if self.cumulative is None:
            raise NotImplementedError(f"Distribution '{self.name}' does not define a cdf.")
        with np.errstate(all="ignore"):
            return self.cumulative(np.float64(x), self.resolve(params))


_REGISTRY: dict[str, Distribution] = {}


def list_distributions(category: str | None = None) -> list[str]:
    """Return registered distribution names, optionally for one category."""
    return sorted(
        key
        for key, dist in _REGISTRY.items()
        if category is None or dist.category == category
    )


def get_distribution(name: str) -> Distribution:
    """Look up a distribution; names are case-insensitive."""
    try:
        return _REGISTRY[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown distribution '{name}'.") from None


def register_distribution(distribution: Distribution, *, overwrite: bool = False) -> None:
    """Add ``distribution`` under its lower-cased name."""
    key = distribution.name.lower()
    if not overwrite and key in _REGISTRY:
        raise ValueError(f"'{distribution.name}' is already in the registry.")
    _REGISTRY[key] = distribution


def clear_registry() -> None:
    """Empty the registry; reload ``cltlab.distributions`` to restore the catalog."""
    _REGISTRY.clear()


def _parse_parameters(raw: Any) -> dict[str, ParamSpec]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise TypeError("Distribution parameters must map names to settings.")
    parameters: dict[str, ParamSpec] = {}
    for key, settings in raw.items():
        key = str(key)
        if isinstance(settings, ParamSpec):
            parameters[key] = settings
        elif isinstance(settings, Mapping):
            parameters[key] = ParamSpec.from_mapping(key, settings)
        else:
            parameters[key] = ParamSpec(label=key, description="", default=float(settings))
    return parameters


def _from_mapping(spec: Mapping[str, Any]) -> Distribution:
    return Distribution(
        name=str(spec["name"]),
        label=str(spec.get("label", spec["name"])),
        category=str(spec.get("category", "continuous")),
        sampler=_import_string(spec["generate"]),
        parameters=_parse_parameters(spec.get("parameters")),
        density=_import_string(spec["pdf"]) if spec.get("pdf") else None,
        cumulative=_import_string(spec["cdf"]) if spec.get("cdf") else None,
        notes=spec.get("notes"),
    )


def _iter_distributions(candidate: Any) -> Iterable[Distribution]:
    """Flatten a plugin object into distributions.

    Accepts a :class:`Distribution`, a mapping with ``name`` and ``generate``
    (import strings for the callables), an iterable of either, or a
    zero-argument callable returning any of these.
    """
    if isinstance(candidate, Distribution):
        yield candidate
    elif isinstance(candidate, Mapping):
        if "name" not in candidate or "generate" not in candidate:
            raise TypeError("Distribution mappings need 'name' and 'generate' keys.")
        yield _from_mapping(candidate)
    elif callable(candidate):
        yield from _iter_distributions(candidate())
    elif isinstance(candidate, Iterable) and not isinstance(candidate, str | bytes):
        for item in candidate:
            yield from _iter_distributions(item)
    else:
        raise TypeError(f"Cannot build a distribution from {type(candidate).__name__}.")


def _import_string(path: str) -> Any:
    """Resolve ``package.module:attribute`` (or a dotted path) to an object."""
    module_name, sep, attribute = path.partition(":")
    if not sep:
        module_name, _, attribute = path.rpartition(".")
    if not (module_name and attribute):
        raise ValueError(f"Cannot import '{path}'; use 'package.module:attribute'.")
    target: Any = import_module(module_name)
    for part in attribute.split("."):
        target = getattr(target, part)
    return target


def load_entry_points(group: str = ENTRY_POINT_GROUP) -> list[str]:
    """Register distributions advertised under the ``group`` entry point."""
    loaded: list[str] = []
    try:
        candidates = metadata.entry_points().select(group=group)
    except Exception as exc:  # pragma: no cover - discovery failure
        logger.debug("Entry point discovery failed: %s", exc)
        return loaded

    for ep in candidates:
        try:
            dists = list(_iter_distributions(ep.load()))
        except Exception as exc:  # pragma: no cover - plugin failure
            logger.warning("Skipping distribution plugin '%s': %s", ep.name, exc)
            continue
        for dist in dists:
            register_distribution(dist, overwrite=True)
            loaded.append(dist.name)
    if loaded:
        logger.debug("Registered %d distribution(s) from entry points", len(loaded))
    return loaded


def load_yaml_config(path: str | os.PathLike[str]) -> list[str]:
    """Register the distributions listed under ``distributions:`` in a YAML file.

    Each item is either a mapping understood by the registry or
    ``{"factory": "module:callable", "args": [...], "kwargs": {...}}``. Items
    that fail to import or validate are logged and skipped.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("Distribution config %s not found; skipping", path)
        return []
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.warning("Could not parse distribution config %s: %s", path, exc)
        return []

    registered: list[str] = []
    for item in data.get("distributions") or []:
        if not isinstance(item, Mapping):
            logger.warning("Skipping non-mapping entry %r in %s", item, path)
            continue
        overwrite = bool(item.get("overwrite", True))
        try:
            if "factory" in item:
                factory = _import_string(item["factory"])
                source = factory(*item.get("args", []), **item.get("kwargs", {}))
            else:
                source = {key: value for key, value in item.items() if key != "overwrite"}
            for dist in _iter_distributions(source):
                register_distribution(dist, overwrite=overwrite)
                registered.append(dist.name)
        except Exception as exc:
            logger.warning("Skipping entry %r in %s: %s", item.get("name", item), path, exc)
    if registered:
        logger.debug("Registered %s from %s", ", ".join(registered), path)
    return registered


__all__ = [
    "CATEGORIES",
    "Distribution",
    "Density",
    "ENTRY_POINT_GROUP",
    "ParamSpec",
    "Sampler",
    "as_generator",
    "open_uniform",
    "list_distributions",
    "get_distribution",
    "register_distribution",
    "clear_registry",
    "load_entry_points",
    "load_yaml_config",
]
