"""Core rendering module.

Components:
    vec3: Vector helpers (reflect, refract, Schlick reflectance)
    ray: Ray data structure
    interval: Closed real intervals for accepted hit distances
    sampler: Explicit random streams and geometric sampling
    integrator: Light transport and the scanline render kernel
    renderer: Scanline renderer with progress reporting

All per-ray operations are Taichi functions usable inside kernels.
"""

from .interval import (
    EMPTY,
    UNIVERSE,
    Interval,
    empty_interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
    universe_interval,
)
from .ray import Ray, make_ray, ray_at
from .sampler import (
    random_f32,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_on_hemisphere,
    random_range,
    random_unit_vector,
    seed_rng,
)
from .vec3 import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    reflect,
    reflectance,
    refract,
    unit_vector,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from mcray.core.integrator or mcray.core.renderer when needed.

__all__ = [
    "vec3",
    "length",
    "length_squared",
    "dot",
    "cross",
    "unit_vector",
    "near_zero",
    "reflect",
    "refract",
    "reflectance",
    "Ray",
    "ray_at",
    "make_ray",
    "Interval",
    "EMPTY",
    "UNIVERSE",
    "make_interval",
    "empty_interval",
    "universe_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "seed_rng",
    "random_f32",
    "random_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_in_unit_disk",
]
