"""Unit tests for the SceneManager and scene presets.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Material type tracking and lookup
- Sphere addition with materials and convenience methods
- Scene serialization (to_config, from_config, to_dict, from_dict)
- Scene clearing
- Kernel-side material type dispatch
- Preset scenes
"""

import json

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from mcray.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_material_ids_are_sequential_across_types(self, fresh_scene):
        assert fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5)) == 0
        assert fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=0.3) == 1
        assert fresh_scene.add_dielectric_material(ior=1.5) == 2
        assert fresh_scene.add_lambertian_material(albedo=(0.1, 0.2, 0.3)) == 3
        assert fresh_scene.get_material_count() == 4

    def test_type_local_indices(self, fresh_scene):
        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))
        second_lambertian = fresh_scene.add_lambertian_material(albedo=(0.1, 0.2, 0.3))

        info = fresh_scene.get_material_info(second_lambertian)
        assert info is not None
        assert info.type_index == 1
        assert info.params["albedo"] == (0.1, 0.2, 0.3)

    def test_material_validation(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(1.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5), fuzz=2.0)
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ior=0.0)
        # Failed registrations do not consume material IDs
        assert fresh_scene.get_material_count() == 0

    def test_get_material_type_python(self, fresh_scene):
        from mcray.scene.manager import MaterialType

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))
        fresh_scene.add_dielectric_material()

        assert fresh_scene.get_material_type_python(0) == MaterialType.LAMBERTIAN
        assert fresh_scene.get_material_type_python(1) == MaterialType.METAL
        assert fresh_scene.get_material_type_python(2) == MaterialType.DIELECTRIC
        assert fresh_scene.get_material_type_python(3) is None
        assert fresh_scene.get_material_info(-1) is None

    def test_get_material_type_in_kernel(self, fresh_scene):
        from mcray.scene.manager import MaterialType, get_material_type, get_material_type_index

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))
        fresh_scene.add_dielectric_material(ior=1.5)
        fresh_scene.add_metal_material(albedo=(0.2, 0.2, 0.2))

        types = ti.field(dtype=ti.i32, shape=5)
        indices = ti.field(dtype=ti.i32, shape=5)

        @ti.kernel
        def test_kernel():
            for k in range(5):
                mat_id = k
                if k == 4:
                    mat_id = 99
                types[k] = get_material_type(mat_id)
                indices[k] = get_material_type_index(mat_id)

        test_kernel()

        assert types[0] == int(MaterialType.LAMBERTIAN)
        assert types[1] == int(MaterialType.METAL)
        assert types[2] == int(MaterialType.DIELECTRIC)
        assert types[3] == int(MaterialType.METAL)
        assert indices[3] == 1
        assert types[4] == -1
        assert indices[4] == -1


class TestSphereManagement:
    """Tests for adding spheres."""

    def test_add_sphere_with_material(self, fresh_scene):
        mat = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        idx = fresh_scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=mat)

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.spheres[0].material_id == mat

    def test_add_sphere_invalid_material(self, fresh_scene):
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere(center=(0.0, 0.0, 0.0), radius=1.0, material_id=0)

    def test_shared_material_and_negative_radius(self, fresh_scene):
        glass = fresh_scene.add_dielectric_material(ior=1.5)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

        assert fresh_scene.get_material_count() == 1
        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.spheres[1].radius == -0.4

    def test_convenience_methods(self, fresh_scene):
        from mcray.scene.manager import MaterialType

        s0, m0 = fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
        s1, m1 = fresh_scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=1.0)
        s2, m2 = fresh_scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, ior=1.33)

        assert (s0, s1, s2) == (0, 1, 2)
        assert (m0, m1, m2) == (0, 1, 2)
        assert fresh_scene.get_material_type_python(m1) == MaterialType.METAL
        assert fresh_scene.get_material_info(m2).params == {"ior": 1.33}

    def test_clear_scene(self, fresh_scene):
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_capacity_methods(self):
        from mcray.scene.intersection import MAX_SPHERES
        from mcray.scene.manager import MAX_MATERIALS, SceneManager

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_materials() == MAX_MATERIALS


class TestSerialization:
    """Tests for scene serialization."""

    def test_to_config(self, fresh_scene):
        ground = fresh_scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        metal = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.5)
        fresh_scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        fresh_scene.add_sphere((1.0, 0.0, -1.0), 0.5, metal)

        config = fresh_scene.to_config()

        assert config.materials == [
            {"type": "lambertian", "albedo": (0.8, 0.8, 0.0)},
            {"type": "metal", "albedo": (0.8, 0.6, 0.2), "fuzz": 0.5},
        ]
        assert config.spheres[1] == {"center": [1.0, 0.0, -1.0], "radius": 0.5, "material_id": 1}

    def test_from_config(self, fresh_scene):
        from mcray.scene.manager import MaterialType, SceneConfig

        config = SceneConfig(
            materials=[
                {"type": "lambertian", "albedo": [0.5, 0.5, 0.5]},
                {"type": "dielectric", "ior": 1.5},
            ],
            spheres=[
                {"center": [0.0, 0.0, -1.0], "radius": 0.5, "material_id": 1},
                {"center": [0.0, 0.0, -1.0], "radius": -0.45, "material_id": 1},
                {"center": [0.0, -100.5, -1.0], "radius": 100.0, "material_id": 0},
            ],
        )
        fresh_scene.from_config(config)

        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.get_material_type_python(1) == MaterialType.DIELECTRIC
        assert fresh_scene.spheres[0].center == (0.0, 0.0, -1.0)

    def test_to_dict_from_dict_json_round_trip(self, fresh_scene):
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
        fresh_scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=1.0)
        fresh_scene.add_dielectric_sphere((-1.0, 0.0, -1.0), -0.4, ior=1.5)

        data = json.loads(json.dumps(fresh_scene.to_dict()))
        fresh_scene.from_dict(data)

        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.get_material_count() == 3
        reloaded = json.loads(json.dumps(fresh_scene.to_dict()))
        assert reloaded == data

    def test_from_config_invalid_material_type(self, fresh_scene):
        from mcray.scene.manager import SceneConfig

        config = SceneConfig(materials=[{"type": "phosphorescent"}])
        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_config(config)

    def test_from_config_invalid_sphere_material(self, fresh_scene):
        from mcray.scene.manager import SceneConfig

        config = SceneConfig(
            materials=[{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            spheres=[{"center": [0.0, 0.0, 0.0], "radius": 1.0, "material_id": 5}],
        )
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.from_config(config)


class TestPresets:
    """Tests for the ready-made scenes."""

    def test_default_scene(self):
        from mcray.scene.manager import MaterialType
        from mcray.scene.presets import create_default_scene

        scene, camera = create_default_scene()

        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4
        assert scene.spheres[1].radius == 100.0
        assert scene.get_material_type_python(2) == MaterialType.METAL
        assert scene.get_material_info(2).params["fuzz"] == 0.3
        assert scene.get_material_info(3).params["fuzz"] == 1.0
        assert camera.image_width == 400
        assert camera.image_height == 225
        assert camera.samples_per_pixel == 100
        assert camera.max_depth == 50
        assert camera.defocus_angle == 0.0

    def test_default_scene_overrides(self):
        from mcray.scene.presets import create_default_scene

        _, camera = create_default_scene(image_width=32, samples_per_pixel=2, max_depth=3)
        assert camera.image_width == 32
        assert camera.samples_per_pixel == 2
        assert camera.max_depth == 3

    def test_glass_scene_has_hollow_shell(self):
        from mcray.scene.manager import MaterialType
        from mcray.scene.presets import create_glass_scene

        scene, camera = create_glass_scene()

        shell = [s for s in scene.spheres if s.center == (-1.0, 0.0, -1.0)]
        assert len(shell) == 2
        assert shell[0].material_id == shell[1].material_id
        assert scene.get_material_type_python(shell[0].material_id) == MaterialType.DIELECTRIC
        assert sorted(s.radius for s in shell) == [-0.4, 0.5]
        assert camera.defocus_angle > 0.0
        assert camera.focus_dist == 3.4

    def test_presets_replace_previous_scene(self):
        from mcray.scene.presets import create_default_scene, create_glass_scene

        create_glass_scene()
        scene, _ = create_default_scene()
        assert scene.get_sphere_count() == 4
