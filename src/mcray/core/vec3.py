"""Vector utilities for points, directions and colors.

``vec3`` is Taichi's 3-component vector, used interchangeably as a point in
space, a direction, and a linear RGB color. Arithmetic (``+``, ``-``, unary
``-``, component-wise ``*``, scalar ``*`` and ``/``) is provided by Taichi's
value semantics; this module adds the geometric helpers the tracer needs.

All helpers are ``@ti.func`` and can only be called from Taichi scope.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.core.vec3 import reflect, vec3
    >>> # Inside a kernel:
    >>> # mirrored = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Args:
        v: The input vector. Must have non-zero length; a zero vector is a
            caller error and yields non-finite components.

    Returns:
        ``v / length(v)``.
    """
    return v / tm.length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero.

    Used to catch degenerate scatter directions before they become rays.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, else 0.
    """
    s = NEAR_ZERO_EPSILON
    return ti.select(ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s, 1, 0)


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror a direction about a normal.

    Computes ``v - 2 * dot(v, n) * n``. The normal must be unit length.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The unit surface normal.

    Returns:
        The reflected direction, same length as ``v``.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Bend a unit direction through an interface using Snell's law.

    The outgoing direction is split into the part perpendicular to the
    normal and the part parallel to it:

        r_perp     = eta * (uv + cos_theta * n)
        r_parallel = -sqrt(|1 - |r_perp|^2|) * n

    Args:
        uv: The unit incoming direction.
        n: The unit normal, facing against ``uv``.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The unit refracted direction. Total internal reflection must have
        been ruled out by the caller.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Schlick's polynomial approximation of Fresnel reflectance.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        refraction_ratio: Ratio of refractive indices at the interface.

    Returns:
        Probability of reflection in [0, 1].
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
