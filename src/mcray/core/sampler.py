"""Explicit random number streams for Monte Carlo sampling.

Every function that consumes randomness takes a 32-bit generator ``state``
and returns the advanced state next to its result, so a caller always knows
exactly which stream a draw came from. Streams are seeded per
(render seed, pixel, sample) triple, which makes renders reproducible and
independent of how Taichi schedules pixels across threads.

The generator is Marsaglia's 32-bit xorshift; seeds are scrambled with
Thomas Wang's integer hash. Right shifts are written as unsigned integer
division so they stay logical on every backend.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.core.sampler import random_f32, seed_rng
    >>> # Inside a kernel:
    >>> # state = seed_rng(seed, pixel_index, sample_index)
    >>> # u, state = random_f32(state)
"""

import taichi as ti

from mcray.core.vec3 import vec3

# Upper bound on rejection-sampling attempts (Taichi has no unbounded loops
# inside functions that return values)
MAX_REJECTION_ATTEMPTS = 100

# 2^-24: random_f32 keeps the top 24 bits of the state
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def _u32(x):
    return ti.cast(x, ti.u32)


@ti.func
def _wang_hash(key: ti.u32) -> ti.u32:
    x = (key ^ _u32(61)) ^ (key // _u32(65536))
    x = x * _u32(9)
    x = x ^ (x // _u32(16))
    x = x * _u32(668265261)
    x = x ^ (x // _u32(32768))
    return x


@ti.func
def _xorshift32(state: ti.u32) -> ti.u32:
    x = state
    x = x ^ (x << _u32(13))
    x = x ^ (x // _u32(131072))
    x = x ^ (x << _u32(5))
    return x


@ti.func
def seed_rng(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the start state of an independent stream.

    Args:
        seed: The render-wide seed.
        pixel_index: Row-major index of the pixel being sampled.
        sample_index: Index of the sample within the pixel.

    Returns:
        A non-zero generator state. Equal inputs always give equal states.
    """
    h = _wang_hash(_u32(sample_index))
    h = _wang_hash(h ^ (_u32(pixel_index) * _u32(16777619)))
    h = _wang_hash(h ^ (_u32(seed) * _u32(2654435)))
    # xorshift never leaves the all-zero state
    if h == _u32(0):
        h = _u32(1)
    return h


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Returns:
        A tuple of (value, next_state).
    """
    next_state = _xorshift32(state)
    value = ti.cast(next_state // _u32(256), ti.f32) * _INV_2_24
    return value, next_state


@ti.func
def random_range(state: ti.u32, lo: ti.f32, hi: ti.f32):
    """Draw a uniform float in [lo, hi).

    Returns:
        A tuple of (value, next_state).
    """
    u, next_state = random_f32(state)
    return lo + (hi - lo) * u, next_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Rejection-sample a point strictly inside the unit sphere.

    Returns:
        A tuple of (point, next_state) with |point| < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = random_range(s, -1.0, 1.0)
            y, s = random_range(s, -1.0, 1.0)
            z, s = random_range(s, -1.0, 1.0)
            candidate = vec3(x, y, z)
            lensq = candidate.dot(candidate)
            # Reject points too close to the center so normalizing is safe
            if 1e-30 < lensq < 1.0:
                p = candidate
                found = True
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Sample a direction uniformly on the unit sphere.

    Returns:
        A tuple of (unit_vector, next_state).
    """
    p, s = random_in_unit_sphere(state)
    return p.normalized(), s


@ti.func
def random_on_hemisphere(normal: vec3, state: ti.u32):
    """Sample a unit direction in the hemisphere around a normal.

    Returns:
        A tuple of (unit_vector, next_state) with dot(result, normal) >= 0.
    """
    on_sphere, s = random_unit_vector(state)
    result = on_sphere
    if on_sphere.dot(normal) < 0.0:
        result = -on_sphere
    return result, s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Rejection-sample a point inside the unit disk in the xy-plane.

    Used to pick ray origins on the camera lens.

    Returns:
        A tuple of (point, next_state) with point.z == 0 and
        point.x^2 + point.y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = random_range(s, -1.0, 1.0)
            y, s = random_range(s, -1.0, 1.0)
            if x * x + y * y < 1.0:
                p = vec3(x, y, 0.0)
                found = True
    return p, s
