"""Surface scattering laws.

``lambertian``, ``metal`` and ``dielectric`` each pair a pure Taichi
``scatter_*`` function, returning ``(direction, attenuation, did_scatter,
state)``, with a field registry of parameters (``add_*_material``,
``clear_*_materials``) and a ``scatter_*_by_id`` lookup. ``params`` holds
the range checks and slot allocation the registries share.

Which law a hit uses is decided by ``mcray.core.integrator.scatter_material``.
"""

from . import dielectric, lambertian, metal
from .dielectric import (
    add_dielectric_material,
    cannot_refract,
    clear_dielectric_materials,
    fresnel_reflectance,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    diffuse_direction,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    reflects_into_surface,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    "dielectric",
    "lambertian",
    "metal",
    "diffuse_direction",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "scatter_metal",
    "scatter_metal_by_id",
    "reflects_into_surface",
    "add_metal_material",
    "clear_metal_materials",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "cannot_refract",
    "fresnel_reflectance",
    "add_dielectric_material",
    "clear_dielectric_materials",
]
