"""Ray data structure.

A ray is an origin point plus a direction vector. The direction is not
required to be unit length, and nothing downstream assumes it is.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.core.ray import Ray, ray_at, vec3
    >>> # Inside a kernel:
    >>> # ray = Ray(origin=vec3(0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti

from mcray.core.vec3 import vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of travel (vec3). Not normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside Taichi scope."""
    return Ray(origin=origin, direction=direction)
