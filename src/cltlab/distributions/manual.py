"""Hand-drawn distributions.

A drawing is held as an immutable :class:`CurveState`; the module-level
``add_point``/``clear_points``/``normalize`` functions return new states. A
:class:`ManualDistribution` is the handle a drawing session owns: it keeps the
current state and exposes density, CDF and sampling on top of it.

Points are kept in insertion order and sorted (stably, on ``x``) whenever they
are read. Duplicate ``x`` values are kept; interpolation then uses the first
bracketing pair in sorted order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

import numpy as np

from .base import Distribution, as_generator

logger = logging.getLogger(__name__)

Point = tuple[float, float]

DEFAULT_LOWER = -5.0
DEFAULT_UPPER = 5.0
MAX_REJECTION_ATTEMPTS = 100


class DrawingPhase(Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    NORMALIZED = "normalized"


@dataclass(slots=True, frozen=True)
class CurveState:
    """Snapshot of a drawing.

    ``lower``/``upper`` are running bounds: they only widen as points are
    added and reset on :func:`clear_points`. They are the rejection-sampling
    window and can be wider than the current points.
    """

    points: tuple[Point, ...] = ()
    lower: float = DEFAULT_LOWER
    upper: float = DEFAULT_UPPER
    phase: DrawingPhase = DrawingPhase.EMPTY

    @property
    def normalized(self) -> bool:
        return self.phase is DrawingPhase.NORMALIZED

    def sorted_points(self) -> list[Point]:
        return sorted(self.points, key=lambda point: point[0])

    def arrays(self) -> tuple[np.ndarray, np.ndarray]:
        ordered = self.sorted_points()
        xs = np.array([point[0] for point in ordered], dtype=float)
        ys = np.array([point[1] for point in ordered], dtype=float)
        return xs, ys


def add_point(state: CurveState, x: float, y: float) -> CurveState:
    """Append a point, clamping ``y`` at zero."""
    point = (float(x), max(0.0, float(y)))
    return CurveState(
        points=state.points + (point,),
        lower=min(state.lower, point[0]),
        upper=max(state.upper, point[0]),
        phase=DrawingPhase.ACCUMULATING,
    )


def clear_points(state: CurveState | None = None) -> CurveState:
    return CurveState()


def _trapezoids(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    return np.diff(xs) * (ys[:-1] + ys[1:]) / 2.0


def normalize(state: CurveState) -> CurveState:
    """Rescale ``y`` so the trapezoidal area is one.

    No-op with fewer than two points, when already normalized, or when the
    area is not positive (the state stays unnormalized so a later call can
    retry).
    """
    if len(state.points) < 2 or state.normalized:
        return state
    xs, ys = state.arrays()
    area = float(np.sum(_trapezoids(xs, ys)))
    if not area > 0:
        return state
    points = tuple(zip(xs.tolist(), (ys / area).tolist()))
    return replace(state, points=points, phase=DrawingPhase.NORMALIZED)


def from_points(points: Iterable[Sequence[float]]) -> CurveState:
    """Build a normalized state whose bounds are the extremes of ``points``."""
    cleaned = [(float(x), max(0.0, float(y))) for x, y in points]
    if not cleaned:
        return CurveState()
    cleaned.sort(key=lambda point: point[0])
    state = CurveState(
        points=tuple(cleaned),
        lower=cleaned[0][0],
        upper=cleaned[-1][0],
        phase=DrawingPhase.ACCUMULATING,
    )
    return normalize(state)


def _interpolate(xs: np.ndarray, ys: np.ndarray, x: float) -> float:
    if xs.size < 2 or not xs[0] <= x <= xs[-1]:
        return 0.0
    left = max(int(np.searchsorted(xs, x, side="left")) - 1, 0)
    x1, x2 = xs[left], xs[left + 1]
    y1, y2 = ys[left], ys[left + 1]
    if x2 == x1:
        return float(y1)
    return float(y1 + (y2 - y1) * (x - x1) / (x2 - x1))


def _cumulative(xs: np.ndarray, ys: np.ndarray, x: float) -> float:
    if np.isnan(x):
        return float("nan")
    if xs.size < 2 or x < xs[0]:
        return 0.0
    if x > xs[-1]:
        return 1.0
    count = int(np.searchsorted(xs, x, side="right"))
    total = float(np.sum(_trapezoids(xs[:count], ys[:count])))
    prev_x, prev_y = xs[count - 1], ys[count - 1]
    if x > prev_x and count < xs.size:
        total += (x - prev_x) * (prev_y + _interpolate(xs, ys, x)) / 2.0
    return total


class ManualDistribution:
    """Session-owned handle around a :class:`CurveState`.

    None of the methods raise on degenerate drawings; they fall back to zeros
    or leave the state untouched.
    """

    def __init__(self, initial_points: Iterable[Sequence[float]] | None = None) -> None:
        self._state = from_points(initial_points) if initial_points is not None else CurveState()

    def __len__(self) -> int:
        return len(self._state.points)

    def __repr__(self) -> str:
        return f"ManualDistribution(points={len(self)}, phase={self.phase.value})"

    @property
    def state(self) -> CurveState:
        return self._state

    @property
    def phase(self) -> DrawingPhase:
        return self._state.phase

    @property
    def normalized(self) -> bool:
        return self._state.normalized

    @property
    def bounds(self) -> tuple[float, float]:
        return self._state.lower, self._state.upper

    def add_point(self, x: float, y: float) -> None:
        self._state = add_point(self._state, x, y)

    def clear_points(self) -> None:
        self._state = clear_points(self._state)

    def normalize(self) -> None:
        self._state = normalize(self._state)

    def get_points(self) -> list[Point]:
        return self._state.sorted_points()

    def pdf(self, x: float) -> float:
        xs, ys = self._state.arrays()
        return _interpolate(xs, ys, x)

    def cdf(self, x: float) -> float:
        xs, ys = self._state.arrays()
        return _cumulative(xs, ys, x)

    def sample(self, random_state: np.random.Generator | int | None = None) -> float:
        """Draw one value.

        Rejection sampling over the running bounds for up to
        ``MAX_REJECTION_ATTEMPTS`` tries, then inverse transform on the point
        grid, then the middle point. Returns 0 with fewer than two points.
        """
        if len(self._state.points) < 2:
            return 0.0
        rng = as_generator(random_state)
        if not self.normalized:
            self.normalize()
        state = self._state
        xs, ys = state.arrays()
        max_y = float(ys.max())

        for _ in range(MAX_REJECTION_ATTEMPTS):
            x = state.lower + rng.random() * (state.upper - state.lower)
            if rng.random() * max_y <= _interpolate(xs, ys, x):
                return float(x)

        logger.debug(
            "Rejection sampling gave up after %d attempts; using inverse transform",
            MAX_REJECTION_ATTEMPTS,
        )
        grid_cdf = np.concatenate(([0.0], np.cumsum(_trapezoids(xs, ys))))
        hits = np.flatnonzero(grid_cdf >= rng.random())
        if hits.size:
            return float(xs[hits[0]])
        return float(xs[xs.size // 2])

    def generate_samples(
        self, n: int, random_state: np.random.Generator | int | None = None
    ) -> np.ndarray:
        rng = as_generator(random_state)
        return np.array([self.sample(rng) for _ in range(n)], dtype=float)

    def get_stats(self) -> dict[str, float]:
        """Mean and variance from trapezoid areas placed at segment midpoints."""
        if len(self._state.points) < 2:
            return {"mean": 0.0, "variance": 0.0}
        xs, ys = self._state.arrays()
        areas = _trapezoids(xs, ys)
        midpoints = (xs[:-1] + xs[1:]) / 2.0
        total = float(np.sum(areas))
        if total <= 0:
            return {"mean": 0.0, "variance": 0.0}
        mean = float(np.sum(midpoints * areas) / total)
        variance = float(np.sum(np.square(midpoints - mean) * areas) / total)
        return {"mean": mean, "variance": variance}

    def histogram_data(self, bins: int = 50) -> list[Point]:
        """Evenly spaced ``(x, pdf(x))`` pairs across the drawn range."""
        if len(self._state.points) < 2:
            return []
        xs, ys = self._state.arrays()
        grid = np.linspace(xs[0], xs[-1], bins + 1)
        return [(float(x), _interpolate(xs, ys, x)) for x in grid]

    def add_stroke(
        self,
        start: Point,
        end: Point,
        *,
        smoothing: float = 5.0,
        min_distance: float = 0.03,
    ) -> int:
        """Add the points of a pointer drag from ``start`` to ``end``.

        Moves shorter than ``min_distance`` are ignored. Otherwise the segment
        is split into ``ceil(distance * smoothing)`` steps and every point
        after ``start`` is added. Returns the number of points added.
        """
        (x0, y0), (x1, y1) = start, end
        distance = float(np.hypot(x1 - x0, y1 - y0))
        if distance < min_distance:
            return 0
        steps = max(int(np.ceil(distance * smoothing)), 1)
        for i in range(1, steps + 1):
            t = i / steps
            self.add_point(x0 + t * (x1 - x0), y0 + t * (y1 - y0))
        return steps

    def as_distribution(self) -> Distribution:
        """Expose this drawing through the catalog interface."""
        return Distribution(
            name="manual",
            label="Manual Distribution",
            category="continuous",
            sampler=lambda params, rng: self.sample(rng),
            density=lambda x, params: self.pdf(x),
            cumulative=lambda x, params: self.cdf(x),
            notes="Hand-drawn curve.",
        )


def normalize_bins(bins: Sequence[float]) -> np.ndarray:
    """Scale bar heights to sum to one (uniform when they are all zero)."""
    heights = np.asarray(bins, dtype=float)
    total = float(heights.sum())
    if total == 0:
        return np.full(heights.size, 1.0 / heights.size) if heights.size else heights
    return heights / total


def sample_bins(
    bins: Sequence[float],
    size: int,
    *,
    random_state: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Sample bar positions from a drawn bar chart.

    Bar ``j`` covers ``[j, j + 1)``; draws land on the bar centre plus
    uniform noise of +/-0.4.
    """
    probabilities = normalize_bins(bins)
    if probabilities.size == 0:
        raise ValueError("At least one bin is required.")
    rng = as_generator(random_state)
    cumulative = np.cumsum(probabilities)
    selected = np.searchsorted(cumulative, rng.random(size), side="left")
    selected = np.minimum(selected, probabilities.size - 1)
    noise = (rng.random(size) - 0.5) * 0.8
    return selected + 0.5 + noise


__all__ = [
    "CurveState",
    "DrawingPhase",
    "ManualDistribution",
    "MAX_REJECTION_ATTEMPTS",
    "add_point",
    "clear_points",
    "from_points",
    "normalize",
    "normalize_bins",
    "sample_bins",
]
