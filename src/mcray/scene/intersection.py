"""Sphere storage and nearest-hit queries.

Spheres live in Structure-of-Arrays fields in insertion order, each tagged
with a material ID. ``intersect_scene`` scans them all, shrinking the upper
end of the search interval to the closest hit seen so far; whatever record
survives the scan is the nearest surface along the ray.

Example:
    >>> from mcray.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
"""

import taichi as ti
import taichi.math as tm

from mcray.core.interval import Interval
from mcray.core.ray import Ray
from mcray.geometry.sphere import HitRecord, Sphere, hit_sphere

vec3 = tm.vec3

MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


@ti.dataclass
class SceneHitRecord:
    """Nearest intersection along a ray, plus the material of what was hit.

    Attributes:
        hit: 1 on a hit, 0 on a miss.
        t: Ray parameter of the hit.
        point: Hit position.
        normal: Unit normal facing against the ray.
        front_face: 1 if the ray arrived from the outward side.
        material_id: Material of the sphere hit, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


def clear_scene() -> None:
    """Drop every sphere. Stale field entries are overwritten by later adds."""
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Append a sphere and return its index.

    ``radius`` is stored signed; a negative value turns the normals inward.

    Raises:
        RuntimeError: If the storage is full.
    """
    index = int(num_spheres[None])
    if index >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[index] = center
    sphere_radii[index] = radius
    sphere_material_ids[index] = material_id
    num_spheres[None] = index + 1
    return index


def get_sphere_count() -> int:
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> SceneHitRecord:
    """Nearest sphere hit by ``ray`` with parameter inside ``ray_t``.

    A later sphere replaces the current best only when strictly nearer,
    since each test runs against the open interval up to the best ``t``.
    An empty scene, or one the ray misses, yields ``hit == 0`` and
    ``material_id == -1``.
    """
    nearest = HitRecord()
    nearest_material = -1
    upper = ray_t.max

    for i in range(num_spheres[None]):
        candidate = hit_sphere(
            ray,
            Sphere(center=sphere_centers[i], radius=sphere_radii[i]),
            Interval(min=ray_t.min, max=upper),
        )
        if candidate.hit == 1:
            upper = candidate.t
            nearest = candidate
            nearest_material = sphere_material_ids[i]

    return SceneHitRecord(
        hit=nearest.hit,
        t=nearest.t,
        point=nearest.point,
        normal=nearest.normal,
        front_face=nearest.front_face,
        material_id=nearest_material,
    )
