"""Closed numeric ranges for bounding hit distances and color channels.

An Interval is a ``[min, max]`` pair. ``contains`` is inclusive at both ends,
``surrounds`` is exclusive at both ends and is what intersection code uses to
reject hits that land exactly on a boundary. An interval with ``min > max`` is
a legal empty state: it contains and surrounds nothing.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.core.interval import Interval, interval_clamp
    >>> # Inside a kernel:
    >>> # intensity = Interval(min=0.0, max=0.999)
    >>> # channel = interval_clamp(intensity, 1.7)  # 0.999
"""

import math

import taichi as ti
import taichi.math as tm

# (min, max) bounds of the two named intervals, for Python-side use
EMPTY = (math.inf, -math.inf)
UNIVERSE = (-math.inf, math.inf)


@ti.dataclass
class Interval:
    """A numeric range.

    Attributes:
        min: Lower bound.
        max: Upper bound. Callers keep ``min <= max`` for non-empty ranges.
    """

    min: ti.f32
    max: ti.f32


@ti.func
def make_interval(lo: ti.f32, hi: ti.f32) -> Interval:
    return Interval(min=lo, max=hi)


@ti.func
def empty_interval() -> Interval:
    """The interval containing nothing: min=+inf, max=-inf."""
    return Interval(min=tm.inf, max=-tm.inf)


@ti.func
def universe_interval() -> Interval:
    """The interval containing every finite value: min=-inf, max=+inf."""
    return Interval(min=-tm.inf, max=tm.inf)


@ti.func
def interval_size(interval: Interval) -> ti.f32:
    return interval.max - interval.min


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Inclusive membership test: min <= x <= max."""
    return ti.select(interval.min <= x and x <= interval.max, 1, 0)


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Strict interior test: min < x < max."""
    return ti.select(interval.min < x and x < interval.max, 1, 0)


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Saturate x to the interval bounds."""
    result = x
    if x < interval.min:
        result = interval.min
    elif x > interval.max:
        result = interval.max
    return result
