"""Dielectric: clear glass or water that reflects or refracts each ray.

Refraction follows Snell's law, n1 sin(theta1) = n2 sin(theta2). When the
index ratio times sin(theta) exceeds 1 no refracted ray exists and the ray
reflects (total internal reflection). Otherwise one uniform draw against
Schlick's reflectance picks reflection or refraction. Attenuation is white.

Example:
    >>> # inside a Taichi kernel
    >>> direction, attenuation, did_scatter, state = scatter_dielectric(
    ...     ior, incident_dir, normal, front_face, state
    ... )
"""

import taichi as ti
import taichi.math as tm

from mcray.core.sampler import random_f32
from mcray.core.vec3 import reflect, reflectance, refract
from mcray.materials.params import claim_slot, new_counter

vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of indices for a ray entering (front face) or leaving the medium."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Check for total internal reflection.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves.

    Returns:
        1 if no refracted direction exists, 0 otherwise.
    """
    ratio = refraction_ratio_for(ior, front_face)
    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)
    return ti.select(ratio * sin_theta > 1.0, 1, 0)


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Choose between reflection and refraction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit normal, facing the incoming ray.
        front_face: 1 if the ray is entering the material from outside,
            0 if it is inside the material heading out.
        state: Random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state):
        - scattered_direction: The unit reflected or refracted direction.
        - attenuation: White (1, 1, 1).
        - did_scatter: Always 1.
        - state: The advanced stream state.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, front_face)

    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)

    # Always draw so the stream advances the same way on every branch
    u, next_state = random_f32(state)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if ratio * sin_theta > 1.0 or reflectance(cos_theta, ratio) > u:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1, next_state


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance of this interface for the given incoming ray."""
    ratio = refraction_ratio_for(ior, front_face)
    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    return reflectance(cos_theta, ratio)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

MAX_DIELECTRIC_MATERIALS = 256

dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = new_counter()


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Store a dielectric material and return its registry index.

    Args:
        ior: Index of refraction relative to the surrounding medium, e.g.
            1.33 for water, 1.5 for glass, 2.4 for diamond. Values below 1
            model a thinner pocket such as an air bubble in water.

    Raises:
        ValueError: If ``ior`` is not positive.
        RuntimeError: If the registry is full.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    index = claim_slot(num_dielectric_materials, MAX_DIELECTRIC_MATERIALS, "dielectric")
    dielectric_iors[index] = ior
    return index


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """``scatter_dielectric`` with the index stored at ``material_idx``."""
    return scatter_dielectric(
        get_dielectric_ior(material_idx), incident_direction, normal, front_face, state
    )
