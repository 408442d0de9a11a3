"""Typer-based CLI entry point."""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import replace
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .core import SampleStatistics
from .descriptive import describe
from .distributions import CATEGORIES, ManualDistribution, get_distribution, list_distributions
from .sampling import (
    STATISTICS,
    SamplingConfig,
    load_sampling_config,
    sample_distribution,
    simulate,
)

app = typer.Typer(help="cltlab: sampling distributions and the Central Limit Theorem.")
console = Console()

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose output.")
VERSION_OPTION = typer.Option(False, "--version", help="Show version and exit.")

NAME_ARGUMENT = typer.Argument(..., help="Registered distribution name (see `cltlab registry`).")

PARAM_OPTION = typer.Option(
    None,
    "--param",
    "-p",
    help="Distribution parameter as key=value (repeat for multiples).",
    show_default=False,
)

CATEGORY_OPTION = typer.Option(
    None,
    "--category",
    "-c",
    help=f"Restrict the listing to one category ({', '.join(CATEGORIES)}).",
    show_default=False,
)

SIZE_OPTION = typer.Option(1000, "--size", "-n", min=1, help="Number of variates to draw.")
SEED_OPTION = typer.Option(None, "--seed", help="Seed for the random generator.")

SAMPLE_SIZE_OPTION = typer.Option(
    None, "--sample-size", min=1, help="Draws per sub-sample.", show_default=False
)
NUM_SAMPLES_OPTION = typer.Option(
    None, "--num-samples", min=1, help="Number of sub-samples.", show_default=False
)
POPULATION_SIZE_OPTION = typer.Option(
    None,
    "--population-size",
    min=1,
    help="Variates drawn for the population.",
    show_default=False,
)
STATISTIC_OPTION = typer.Option(
    None,
    "--statistic",
    help=f"Statistic computed per sub-sample ({', '.join(STATISTICS)}).",
    show_default=False,
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    exists=True,
    dir_okay=False,
    readable=True,
    help="YAML file with a `sampling` section.",
    show_default=False,
)

POINTS_ARGUMENT = typer.Argument(
    ...,
    exists=True,
    readable=True,
    help="CSV with `x` and `y` columns describing a drawn curve.",
)

SUMMARY_ROWS = (
    ("Count", "count"),
    ("Mean", "mean"),
    ("Variance", "variance"),
    ("SD", "sd"),
    ("Median", "median"),
    ("Skewness", "skewness"),
    ("Excess Kurtosis", "kurtosis"),
    ("Range", "range"),
    ("IQR", "iqr"),
    ("KS vs Normal", "ks"),
    ("KL vs Normal", "kl"),
)


@app.callback(invoke_without_command=True)
def cli_callback(  # noqa: B008
    ctx: typer.Context,
    verbose: bool = VERBOSE_OPTION,
    version: bool = VERSION_OPTION,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    if verbose or version:
        console.print(f"[bold green]cltlab {__version__}[/bold green]")
    if ctx.invoked_subcommand is None and not ctx.resilient_parsing:
        raise typer.Exit()


@app.command()
def registry(category: str | None = CATEGORY_OPTION) -> None:  # noqa: B008
    """List registered distributions."""
    if category is not None and category not in CATEGORIES:
        console.print(
            f"[red]Unknown category '{category}'. Choose from {', '.join(CATEGORIES)}.[/red]"
        )
        raise typer.Exit(code=1)
    table = Table(title="Registered Distributions")
    table.add_column("Name", no_wrap=True)
    table.add_column("Label")
    table.add_column("Category")
    table.add_column("Parameters")
    table.add_column("Description", overflow="fold")
    for name in list_distributions(category):
        dist = get_distribution(name)
        params = ", ".join(
            f"{key}={_format_default(spec.default)}" for key, spec in dist.parameters.items()
        )
        table.add_row(dist.name, dist.label, dist.category, params, dist.notes or "")
    console.print(table)


@app.command()
def sample(  # noqa: B008
    name: str = NAME_ARGUMENT,
    params: list[str] | None = PARAM_OPTION,
    size: int = SIZE_OPTION,
    seed: int | None = SEED_OPTION,
) -> None:
    """Draw a batch of variates and summarise it."""
    try:
        dist = get_distribution(name)
        draws = sample_distribution(dist, _parse_params(params), size, random_state=seed)
    except (KeyError, ValueError) as exc:
        console.print(f"[red]{_message(exc)}[/red]")
        raise typer.Exit(code=1) from exc
    _print_summary(f"{dist.label} ({size} draws)", describe(draws))


@app.command("simulate")
def simulate_command(  # noqa: B008
    name: str = NAME_ARGUMENT,
    params: list[str] | None = PARAM_OPTION,
    sample_size: int | None = SAMPLE_SIZE_OPTION,
    num_samples: int | None = NUM_SAMPLES_OPTION,
    population_size: int | None = POPULATION_SIZE_OPTION,
    statistic: str | None = STATISTIC_OPTION,
    seed: int | None = SEED_OPTION,
    config: Path | None = CONFIG_OPTION,
) -> None:
    """Compare a population with the sampling distribution of a statistic."""
    overrides = {
        "sample_size": sample_size,
        "num_samples": num_samples,
        "population_size": population_size,
        "statistic": statistic,
        "seed": seed,
    }
    try:
        settings = load_sampling_config(config) if config is not None else SamplingConfig()
        settings = replace(
            settings, **{key: value for key, value in overrides.items() if value is not None}
        )
        result = simulate(name, _parse_params(params), settings)
    except (KeyError, ValueError) as exc:
        console.print(f"[red]{_message(exc)}[/red]")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"{result.distribution}: sampling distribution of the {result.statistic}")
    table.add_column("Statistic", no_wrap=True)
    table.add_column("Population", justify="right", no_wrap=True)
    table.add_column(f"Sample {result.statistic}", justify="right", no_wrap=True)
    for label, key in SUMMARY_ROWS:
        table.add_row(
            label,
            _format_metric(getattr(result.population_summary, key)),
            _format_metric(getattr(result.sampling_summary, key)),
        )
    console.print(table)
    if result.statistic == "mean":
        console.print(
            f"Standard error sigma/sqrt(n): {_format_metric(result.standard_error)} "
            f"(n={result.sample_size})"
        )
    if "population_ks" in result.diagnostics:
        console.print(
            "KS distance of the population to its own distribution: "
            f"{_format_metric(result.diagnostics['population_ks'])}"
        )


@app.command()
def manual(  # noqa: B008
    points_file: Path = POINTS_ARGUMENT,
    size: int = SIZE_OPTION,
    seed: int | None = SEED_OPTION,
) -> None:
    """Sample from a hand-drawn curve stored in a CSV file."""
    import pandas as pd

    try:
        data = pd.read_csv(points_file)
        missing = {"x", "y"} - set(data.columns)
        if missing:
            raise ValueError(f"Missing column(s): {', '.join(sorted(missing))}.")
        curve = ManualDistribution(zip(data["x"].to_numpy(), data["y"].to_numpy()))
    except (KeyError, ValueError) as exc:
        console.print(f"[red]{_message(exc)}[/red]")
        raise typer.Exit(code=1) from exc
    if len(curve) < 2:
        console.print("[red]At least two points are needed to describe a curve.[/red]")
        raise typer.Exit(code=1)

    moments = curve.get_stats()
    lower, upper = curve.bounds
    console.print(
        f"[bold]Drawn curve[/bold]: {len(curve)} points on [{lower:g}, {upper:g}], "
        f"mean {_format_metric(moments['mean'])}, "
        f"variance {_format_metric(moments['variance'])}"
    )
    draws = curve.generate_samples(size, random_state=seed)
    _print_summary(f"Manual Distribution ({size} draws)", describe(draws))


def main_entry() -> None:
    app()


def main() -> None:  # pragma: no cover - console entry
    main_entry()


def _print_summary(title: str, summary: SampleStatistics) -> None:
    table = Table(title=title)
    table.add_column("Statistic", no_wrap=True)
    table.add_column("Value", justify="right", no_wrap=True)
    for label, key in SUMMARY_ROWS:
        table.add_row(label, _format_metric(getattr(summary, key)))
    console.print(table)


def _parse_params(values: list[str] | None) -> dict[str, float]:
    params: dict[str, float] = {}
    for item in values or []:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected key=value, got '{item}'.")
        try:
            params[key.strip()] = float(raw)
        except ValueError as exc:
            raise ValueError(f"Parameter '{key.strip()}' needs a numeric value.") from exc
    return params


def _message(exc: Exception) -> str:
    # KeyError wraps its message in quotes; errors may echo user text with brackets.
    if isinstance(exc, KeyError) and exc.args:
        return escape(str(exc.args[0]))
    return escape(str(exc))


def _format_default(value: float) -> str:
    return f"{value:g}"


def _format_metric(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        val = float(value)
        if math.isnan(val) or math.isinf(val):
            return "-"
        return f"{val:.4f}"
    return str(value)
