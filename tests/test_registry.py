import importlib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import numpy as np
import pytest

from cltlab.distributions import (
    STANDARD_DISTRIBUTIONS,
    clear_registry,
    get_distribution,
    list_distributions,
)
from cltlab.distributions import base as base_registry


def _dummy_sampler(params: Mapping[str, float], rng: np.random.Generator) -> float:
    return float(params.get("scale", 1.0))


def _dummy_pdf(x: float, params: Mapping[str, float]) -> float:
    return float(params.get("scale", 1.0))


def _reload_registry() -> None:
    """Reload the distributions module to restore built-ins after tests."""
    import cltlab.distributions as dist_module

    clear_registry()
    importlib.reload(dist_module)


class _DummyEntryPoint:
    def __init__(self, name: str, obj: Any) -> None:
        self.name = name
        self._obj = obj

    def load(self) -> Any:
        return self._obj


def _make_entry_points(result: Iterable[_DummyEntryPoint]) -> Any:
    class _EntryPoints(list):
        def __init__(self, values: Iterable[_DummyEntryPoint]) -> None:
            super().__init__(values)

        def select(self, *, group: str) -> list[_DummyEntryPoint]:
            return list(self)

    return _EntryPoints(result)


def test_default_registry_contains_catalog() -> None:
    names = list_distributions()
    assert len(names) == len(STANDARD_DISTRIBUTIONS) == 32
    assert {"normal", "poisson", "chi_squared", "dirichlet"} <= set(names)
    assert list_distributions("sampling") == ["chi_squared", "f", "student_t"]
    assert list_distributions("multivariate") == ["dirichlet", "multivariate_normal", "wishart"]
    assert len(list_distributions("discrete")) == 9


def test_lookup_is_case_insensitive() -> None:
    assert get_distribution("Normal") is get_distribution("normal")
    with pytest.raises(KeyError):
        get_distribution("not_a_distribution")


def test_duplicate_registration_requires_overwrite() -> None:
    with pytest.raises(ValueError):
        base_registry.register_distribution(get_distribution("normal"))


def test_defaults_fill_missing_parameters() -> None:
    normal = get_distribution("normal")
    assert normal.defaults() == {"mean": 0.0, "sd": 1.0}
    assert normal.resolve({"mean": 3.0}) == {"mean": 3.0, "sd": 1.0}
    assert get_distribution("hypergeometric").defaults() == {"N": 50.0, "K": 10.0, "n": 10.0}


def test_validate_rejects_bad_parameters() -> None:
    normal = get_distribution("normal")
    with pytest.raises(ValueError, match="'sd'"):
        normal.validate({"sd": -1.0})
    with pytest.raises(ValueError, match="Unknown parameter"):
        normal.validate({"sigma": 1.0})
    with pytest.raises(ValueError, match="finite"):
        normal.validate({"mean": float("nan")})
    with pytest.raises(ValueError):
        get_distribution("uniform").validate({"a": 2.0, "b": 1.0})
    with pytest.raises(ValueError):
        get_distribution("triangular").validate({"a": 0.0, "b": 1.0, "c": 2.0})
    with pytest.raises(ValueError):
        get_distribution("hypergeometric").validate({"N": 5.0, "K": 10.0})


def test_missing_pdf_raises_not_implemented() -> None:
    dist = get_distribution("wishart")
    assert not dist.has_pdf
    with pytest.raises(NotImplementedError):
        dist.pdf(1.0)


def test_unknown_category_rejected() -> None:
    with pytest.raises(ValueError, match="category"):
        base_registry.Distribution(
            name="bad", label="Bad", category="other", sampler=_dummy_sampler
        )


def test_entry_point_registration(monkeypatch: pytest.MonkeyPatch) -> None:
    clear_registry()
    _dummy_distribution = base_registry.Distribution(
        name="entrypoint_demo",
        label="Entry-point Demo",
        category="continuous",
        sampler=_dummy_sampler,
        density=_dummy_pdf,
        parameters={"scale": base_registry.ParamSpec("Scale", "Constant value", 1.0)},
        notes="Entry-point supplied distribution.",
    )

    monkeypatch.setattr(
        base_registry.metadata,
        "entry_points",
        lambda: _make_entry_points([_DummyEntryPoint("demo", lambda: _dummy_distribution)]),
    )

    base_registry.load_entry_points()
    assert "entrypoint_demo" in list_distributions()
    dist = get_distribution("entrypoint_demo")
    assert dist.pdf(2.0, {"scale": 2.5}) == pytest.approx(2.5)
    assert dist.generate() == pytest.approx(1.0)

    _reload_registry()


def test_yaml_registration(tmp_path: Path) -> None:
    clear_registry()
    config_path = tmp_path / "custom.yaml"
    config_path.write_text(
        """
metadata:
  title: demo
distributions:
  - name: yaml_demo
    label: YAML Demo
    category: discrete
    parameters:
      scale:
        label: Scale
        default: 3.0
        min: 0.0
    generate: tests.test_registry:_dummy_sampler
    pdf: tests.test_registry:_dummy_pdf
    notes: "YAML supplied distribution."
""",
        encoding="utf-8",
    )

    registered = base_registry.load_yaml_config(config_path)
    assert registered == ["yaml_demo"]
    dist = get_distribution("yaml_demo")
    assert dist.category == "discrete"
    assert dist.generate() == pytest.approx(3.0)
    assert dist.pdf(0.0, {"scale": 4.0}) == pytest.approx(4.0)
    with pytest.raises(ValueError):
        dist.validate({"scale": -1.0})

    _reload_registry()


def test_yaml_missing_file_is_skipped(tmp_path: Path) -> None:
    assert base_registry.load_yaml_config(tmp_path / "absent.yaml") == []


def _dummy_factory(scale: float = 1.0) -> list[base_registry.Distribution]:
    return [
        base_registry.Distribution(
            name=f"factory_{int(scale)}",
            label="Factory Demo",
            category="continuous",
            sampler=_dummy_sampler,
            parameters={"scale": base_registry.ParamSpec("Scale", "Constant value", scale)},
        )
    ]


def test_yaml_factory_registration(tmp_path: Path) -> None:
    config_path = tmp_path / "factory.yaml"
    config_path.write_text(
        """
distributions:
  - factory: tests.test_registry:_dummy_factory
    kwargs:
      scale: 2.0
  - name: broken
    generate: tests.test_registry:does_not_exist
  - just a string
""",
        encoding="utf-8",
    )

    registered = base_registry.load_yaml_config(config_path)
    assert registered == ["factory_2"]
    assert get_distribution("factory_2").generate() == pytest.approx(2.0)
    assert "broken" not in list_distributions()

    _reload_registry()


def test_environment_config_is_loaded_on_import(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_path = tmp_path / "env.yaml"
    config_path.write_text(
        """
distributions:
  - name: env_demo
    generate: tests.test_registry:_dummy_sampler
""",
        encoding="utf-8",
    )
    monkeypatch.setenv("CLTLAB_DISTRIBUTIONS", str(config_path))
    _reload_registry()
    assert "env_demo" in list_distributions()

    monkeypatch.delenv("CLTLAB_DISTRIBUTIONS")
    _reload_registry()
    assert "env_demo" not in list_distributions()
