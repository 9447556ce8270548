"""Ready-made scenes.

Two small scenes built around three spheres resting on a huge ground
sphere:

- ``create_default_scene``: diffuse red center sphere flanked by a slightly
  fuzzy silver metal sphere on the left and a very fuzzy gold metal sphere on
  the right, on a yellow diffuse ground.
- ``create_glass_scene``: the left sphere is replaced by a hollow glass
  shell (a glass sphere with a smaller negative-radius glass sphere inside)
  and the camera looks down from above with a shallow depth of field.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.scene.presets import create_default_scene
    >>> from mcray.core.renderer import Renderer
    >>>
    >>> scene, camera = create_default_scene(image_width=200)
    >>> Renderer(camera).render()
"""

import logging

from mcray.camera.thin_lens import ThinLensCamera
from mcray.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Shared Scene Parameters
# =============================================================================

DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_SAMPLES_PER_PIXEL = 100
DEFAULT_MAX_DEPTH = 50

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
SPHERE_RADIUS = 0.5
CENTER_POSITION = (0.0, 0.0, -1.0)
LEFT_POSITION = (-1.0, 0.0, -1.0)
RIGHT_POSITION = (1.0, 0.0, -1.0)

# Colors
GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.7, 0.3, 0.3)
SILVER_ALBEDO = (0.8, 0.8, 0.8)
GOLD_ALBEDO = (0.8, 0.6, 0.2)
BLUE_ALBEDO = (0.1, 0.2, 0.5)

GLASS_IOR = 1.5
# Radius of the air pocket inside the glass shell
SHELL_INNER_RADIUS = -0.4


def create_default_scene(
    image_width: int = DEFAULT_IMAGE_WIDTH,
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the four-sphere diffuse and metal scene.

    The scene contains, in order:
    - a red Lambertian sphere at the center
    - the yellow Lambertian ground
    - a silver metal sphere (fuzz 0.3) on the left
    - a gold metal sphere (fuzz 1.0) on the right

    The camera sits at the origin looking down -z with a 90 degree vertical
    field of view and no defocus blur.

    Args:
        image_width: Output image width in pixels.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Maximum bounces per sample.

    Returns:
        A tuple of (scene, camera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center = scene.add_lambertian_material(albedo=CENTER_ALBEDO)
    left = scene.add_metal_material(albedo=SILVER_ALBEDO, fuzz=0.3)
    right = scene.add_metal_material(albedo=GOLD_ALBEDO, fuzz=1.0)

    scene.add_sphere(CENTER_POSITION, SPHERE_RADIUS, center)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere(LEFT_POSITION, SPHERE_RADIUS, left)
    scene.add_sphere(RIGHT_POSITION, SPHERE_RADIUS, right)

    camera = ThinLensCamera(
        aspect_ratio=DEFAULT_ASPECT_RATIO,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=90.0,
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
    )

    logger.debug("Created default scene with %d spheres", scene.get_sphere_count())
    return scene, camera


def create_glass_scene(
    image_width: int = DEFAULT_IMAGE_WIDTH,
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the hollow glass shell scene.

    A blue Lambertian sphere at the center, a hollow glass sphere on the
    left and a gold metal sphere on the right. The hollow shell is two
    spheres sharing one glass material: the outer surface, and a smaller
    sphere with a negative radius whose normals point inward.

    The camera looks down at the spheres from above and to the left with a
    narrow field of view and a slight depth-of-field blur focused on the
    center sphere.

    Returns:
        A tuple of (scene, camera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center = scene.add_lambertian_material(albedo=BLUE_ALBEDO)
    glass = scene.add_dielectric_material(ior=GLASS_IOR)
    right = scene.add_metal_material(albedo=GOLD_ALBEDO, fuzz=0.0)

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere(CENTER_POSITION, SPHERE_RADIUS, center)
    scene.add_sphere(LEFT_POSITION, SPHERE_RADIUS, glass)
    scene.add_sphere(LEFT_POSITION, SHELL_INNER_RADIUS, glass)
    scene.add_sphere(RIGHT_POSITION, SPHERE_RADIUS, right)

    camera = ThinLensCamera(
        aspect_ratio=DEFAULT_ASPECT_RATIO,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=20.0,
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=10.0,
        focus_dist=3.4,
    )

    logger.debug("Created glass scene with %d spheres", scene.get_sphere_count())
    return scene, camera
