"""Sphere primitive and ray-sphere intersection.

The intersection solves ``|O + tD - C|^2 = r^2`` with the half-b form of the
quadratic formula. A sphere's radius may be negative: the outward normal
``(p - C) / r`` then points inward, which turns the sphere inside out and is
how hollow glass shells are built.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.geometry.sphere import Sphere, hit_sphere
    >>> # Inside a kernel:
    >>> # sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
    >>> # rec = hit_sphere(ray, sphere, Interval(min=0.001, max=tm.inf))
"""

import taichi as ti
import taichi.math as tm

from mcray.core.interval import Interval, interval_surrounds
from mcray.core.ray import Ray, ray_at
from mcray.core.vec3 import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and signed radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius. Negative values flip the inside/outside sense
            of the surface.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected the surface, 0 if it missed. The
            remaining fields are only meaningful when hit == 1.
        t: Ray parameter of the intersection.
        point: The intersection point.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the geometric outward normal already faced the ray,
            0 if it had to be flipped (the ray arrived from inside).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient an outward normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit geometric normal pointing out of the surface.

    Returns:
        A tuple of (normal, front_face).
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return normal, front_face


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with a sphere.

    With ``oc = origin - center`` the quadratic coefficients are:

        a = dot(direction, direction)
        h = dot(direction, oc)          (half of the usual b)
        c = dot(oc, oc) - radius^2
        discriminant = h^2 - a*c

    The smaller root is taken if ``ray_t`` strictly surrounds it, otherwise
    the larger root under the same test. A negative discriminant or a
    zero-length direction is a miss.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        ray_t: Accepted range of ray parameters (exclusive at both ends).

    Returns:
        A HitRecord; check its hit field before using the rest.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration of branch results
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if a > 0.0 and discriminant >= 0.0:
        sqrt_d = tm.sqrt(discriminant)

        root = (-h - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (-h + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            hit_normal, is_front_face = set_face_normal(ray.direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere inside Taichi scope."""
    return Sphere(center=center, radius=radius)
