"""Scene construction: materials, spheres and the material ID table.

Each material variant keeps its own parameter registry. The manager hands
out one ID space over all of them and records, per ID, which registry the
material lives in and at what slot. The integrator reads that table through
``get_material_type`` and ``get_material_type_index`` to pick a scattering
law for a hit.

Materials are shared: any number of spheres may reference one material ID.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable

import taichi as ti

from mcray.materials import dielectric, lambertian, metal
from mcray.scene import intersection

logger = logging.getLogger(__name__)

Triple = tuple[float, float, float]


class MaterialType(IntEnum):
    """Scattering law a material ID dispatches to."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


MAX_MATERIALS = (
    lambertian.MAX_LAMBERTIAN_MATERIALS
    + metal.MAX_METAL_MATERIALS
    + dielectric.MAX_DIELECTRIC_MATERIALS
)

# Per material ID: its MaterialType and its slot in that type's registry
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType value for ``material_id``, or -1 if it is not registered."""
    kind = -1
    if 0 <= material_id < num_materials[None]:
        kind = material_types[material_id]
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Registry slot for ``material_id``, or -1 if it is not registered."""
    slot = -1
    if 0 <= material_id < num_materials[None]:
        slot = material_type_indices[material_id]
    return slot


@dataclass
class MaterialInfo:
    """Python-side record of a registered material.

    Attributes:
        material_id: ID shared by every sphere using this material.
        material_type: Which scattering law applies.
        type_index: Slot in the registry for ``material_type``.
        params: Keyword parameters the material was created with.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Python-side record of a sphere, in scene order."""

    sphere_index: int
    center: Triple
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene.

    ``materials`` holds one dict per material ID, in ID order, each with a
    ``"type"`` key. ``spheres`` holds center, radius and material_id dicts.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any) -> Triple:
    return (float(values[0]), float(values[1]), float(values[2]))


# Registry entry point for each variant, called with the material's params
_REGISTRARS: dict[MaterialType, Callable[..., int]] = {
    MaterialType.LAMBERTIAN: lambertian.add_lambertian_material,
    MaterialType.METAL: metal.add_metal_material,
    MaterialType.DIELECTRIC: dielectric.add_dielectric_material,
}


def _params_from_config(kind: MaterialType, entry: dict[str, Any]) -> dict[str, Any]:
    """Read one material's parameters from a config entry, filling defaults."""
    if kind == MaterialType.LAMBERTIAN:
        return {"albedo": _as_triple(entry.get("albedo", (0.5, 0.5, 0.5)))}
    if kind == MaterialType.METAL:
        return {
            "albedo": _as_triple(entry.get("albedo", (0.8, 0.8, 0.8))),
            "fuzz": float(entry.get("fuzz", 0.0)),
        }
    return {"ior": float(entry.get("ior", 1.5))}


class SceneManager:
    """Builds the scene held in the module-level Taichi fields.

    Only one scene exists at a time: creating a manager, calling ``clear`` or
    loading a config wipes whatever was registered before.

    Attributes:
        materials: MaterialInfo per material ID.
        spheres: SphereInfo per sphere, in scene order.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
        >>> scene.add_sphere((-1, 0, -1), -0.4, glass)  # hollow shell
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material."""
        intersection.clear_scene()
        lambertian.clear_lambertian_materials()
        metal.clear_metal_materials()
        dielectric.clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    def add_material(self, material_type: MaterialType, **params: Any) -> int:
        """Register a material of any variant and return its ID.

        Raises:
            RuntimeError: If the material table or the variant's registry is full.
            ValueError: If the parameters are out of range. No ID is used up.
        """
        material_id = int(num_materials[None])
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        type_index = _REGISTRARS[material_type](**params)

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1
        self.materials.append(MaterialInfo(material_id, material_type, type_index, params))

        logger.debug("Material %d is %s %s", material_id, material_type.name.lower(), params)
        return material_id

    def add_lambertian_material(self, albedo: Triple) -> int:
        """Add a diffuse material. Albedo components must lie in [0, 1]."""
        return self.add_material(MaterialType.LAMBERTIAN, albedo=albedo)

    def add_metal_material(self, albedo: Triple, fuzz: float = 0.0) -> int:
        """Add a metal material.

        Args:
            albedo: Reflected color, components in [0, 1].
            fuzz: Radius of the blur sphere around the mirror direction, in
                [0, 1]. Zero is a perfect mirror.
        """
        return self.add_material(MaterialType.METAL, albedo=albedo, fuzz=fuzz)

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a clear refracting material with index of refraction ``ior``."""
        return self.add_material(MaterialType.DIELECTRIC, ior=ior)

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """MaterialType for an ID, or None. Kernels use ``get_material_type``."""
        info = self.get_material_info(material_id)
        return None if info is None else info.material_type

    # -------------------------------------------------------------------------
    # Spheres
    # -------------------------------------------------------------------------

    def add_sphere(self, center: Triple, radius: float, material_id: int) -> int:
        """Place a sphere using an already registered material.

        A negative radius keeps the geometry but points the normals inward,
        which models the inner wall of a hollow glass ball.

        Returns:
            Index of the sphere in scene order.

        Raises:
            ValueError: If ``material_id`` has not been registered.
            RuntimeError: If the sphere storage is full.
        """
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        index = intersection.add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(index, center, radius, material_id))
        return index

    def _add_with_material(
        self, center: Triple, radius: float, material_id: int
    ) -> tuple[int, int]:
        return self.add_sphere(center, radius, material_id), material_id

    def add_lambertian_sphere(
        self, center: Triple, radius: float, albedo: Triple
    ) -> tuple[int, int]:
        """Add a sphere with its own diffuse material. Returns (sphere, material)."""
        return self._add_with_material(center, radius, self.add_lambertian_material(albedo))

    def add_metal_sphere(
        self, center: Triple, radius: float, albedo: Triple, fuzz: float = 0.0
    ) -> tuple[int, int]:
        """Add a sphere with its own metal material. Returns (sphere, material)."""
        return self._add_with_material(
            center, radius, self.add_metal_material(albedo, fuzz)
        )

    def add_dielectric_sphere(
        self, center: Triple, radius: float, ior: float = 1.5
    ) -> tuple[int, int]:
        """Add a sphere with its own dielectric material. Returns (sphere, material)."""
        return self._add_with_material(center, radius, self.add_dielectric_material(ior))

    def get_sphere_count(self) -> int:
        return intersection.get_sphere_count()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_config(self) -> SceneConfig:
        materials = [
            {"type": info.material_type.name.lower(), **info.params}
            for info in self.materials
        ]
        spheres = [
            {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
            for s in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with ``config``.

        Materials are registered in list order, so the IDs sphere entries
        refer to are list positions.

        Raises:
            ValueError: On an unknown material type, out-of-range parameters
                or a sphere referencing a missing material.
        """
        self.clear()

        for entry in config.materials:
            name = str(entry.get("type", "")).lower()
            try:
                kind = MaterialType[name.upper()]
            except KeyError:
                raise ValueError(f"Unknown material type: {name}") from None
            self.add_material(kind, **_params_from_config(kind, entry))

        for entry in config.spheres:
            self.add_sphere(
                _as_triple(entry.get("center", (0.0, 0.0, 0.0))),
                float(entry.get("radius", 1.0)),
                int(entry.get("material_id", 0)),
            )

        logger.info(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form of ``to_config``."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dict with "materials" and "spheres" lists."""
        self.from_config(
            SceneConfig(
                materials=data.get("materials", []),
                spheres=data.get("spheres", []),
            )
        )

    @staticmethod
    def get_max_spheres() -> int:
        return intersection.MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
