"""Scene module for scene storage, intersection and construction.

Components:
    intersection: Sphere storage and nearest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes paired with a camera

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere data
    - A unified material ID space over the per-type material registries
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import create_default_scene, create_glass_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "create_default_scene",
    "create_glass_scene",
]
