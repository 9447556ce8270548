"""Lambertian (ideal diffuse) scattering.

The bounce direction is the normal offset by a uniform unit vector. That
point lies on the unit sphere tangent to the surface, and its direction is
cosine distributed about the normal, which is exactly the diffuse lobe, so
the path weight is just the albedo. Diffuse surfaces never absorb a path
outright.

Example:
    >>> # inside a Taichi kernel
    >>> direction, attenuation, did_scatter, state = scatter_lambertian(
    ...     albedo, normal, state
    ... )
"""

import taichi as ti
import taichi.math as tm

from mcray.core.sampler import random_unit_vector
from mcray.core.vec3 import near_zero
from mcray.materials.params import check_albedo, claim_slot, new_counter

vec3 = tm.vec3


@ti.func
def diffuse_direction(normal: vec3, offset: vec3) -> vec3:
    """``normal + offset``, or the bare normal if the two cancel out."""
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a diffuse bounce.

    Args:
        albedo: Reflectance per channel.
        normal: Unit normal facing the incoming ray.
        state: Random stream state.

    Returns:
        ``(direction, attenuation, did_scatter, state)``. The direction is
        not normalized; see ``diffuse_direction``. ``did_scatter`` is always 1.
    """
    offset, state = random_unit_vector(state)
    return diffuse_direction(normal, offset), albedo, 1, state


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = new_counter()


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a diffuse material and return its registry index.

    Raises:
        ValueError: If an albedo component is outside [0, 1].
        RuntimeError: If the registry is full.
    """
    check_albedo(albedo)
    index = claim_slot(num_lambertian_materials, MAX_LAMBERTIAN_MATERIALS, "Lambertian")
    lambertian_albedos[index] = albedo
    return index


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3, state: ti.u32):
    """``scatter_lambertian`` with the albedo stored at ``material_idx``."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal, state)
