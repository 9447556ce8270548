"""Metal: mirror reflection blurred by a fuzz sphere.

The incoming direction is normalized and mirrored about the normal,
``R = I - 2(I . N)N``, then offset by a random unit vector scaled by the
fuzz radius. Fuzz 0 is a perfect mirror and 1 the blurriest reflection.

A fuzzed ray is returned even when it ends up below the surface
(``dot(R, N) <= 0``), so grazing light can leak through the metal.
``reflects_into_surface`` tells such rays apart.

Example:
    >>> # inside a Taichi kernel
    >>> direction, attenuation, did_scatter, state = scatter_metal(
    ...     albedo, fuzz, incident_dir, normal, state
    ... )
"""

import taichi as ti
import taichi.math as tm

from mcray.core.sampler import random_unit_vector
from mcray.core.vec3 import reflect
from mcray.materials.params import check_albedo, claim_slot, new_counter

vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Reflect off a metal surface.

    Returns:
        ``(direction, attenuation, did_scatter, state)`` where direction is
        ``reflect(unit(incident), normal) + fuzz * random_unit_vector`` (not
        normalized), attenuation is the albedo and ``did_scatter`` is 1.
    """
    mirrored = reflect(tm.normalize(incident_direction), normal)
    offset, state = random_unit_vector(state)
    return mirrored + fuzz * offset, albedo, 1, state


@ti.func
def reflects_into_surface(scattered_direction: vec3, normal: vec3) -> ti.i32:
    """1 if a fuzzed reflection points back into the surface, else 0."""
    return ti.select(tm.dot(scattered_direction, normal) <= 0.0, 1, 0)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = new_counter()


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Store a metal material and return its registry index.

    Args:
        albedo: Reflected color, components in [0, 1].
        fuzz: Blur radius in [0, 1].

    Raises:
        ValueError: If the albedo or fuzz is out of range.
        RuntimeError: If the registry is full.
    """
    check_albedo(albedo)
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(f"Fuzz = {fuzz} is outside [0, 1] (0 is a perfect mirror).")

    index = claim_slot(num_metal_materials, MAX_METAL_MATERIALS, "metal")
    metal_albedos[index] = albedo
    metal_fuzzes[index] = fuzz
    return index


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """``scatter_metal`` with the parameters stored at ``material_idx``."""
    return scatter_metal(
        get_metal_albedo(material_idx),
        get_metal_fuzz(material_idx),
        incident_direction,
        normal,
        state,
    )
