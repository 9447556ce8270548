"""Monte Carlo light transport and the per-scanline render kernel.

This module turns camera rays into pixel colors. Each sample follows a path
from the camera into the scene, bouncing off surfaces according to their
material, until it escapes to the sky, is absorbed, or runs out of bounces.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Iterative bounce loop carrying the product of attenuations
    - Vertical white-to-blue sky gradient for escaped rays
    - Square-root gamma encoding and 8-bit quantization
    - Explicit per-sample random streams: a pixel's color depends only on
      (seed, pixel index, sample index), never on thread scheduling

Rendering happens one scanline at a time; the pixels of a scanline are
processed in parallel by Taichi.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.core.integrator import render_scanline, setup_render_target
    >>> from mcray.camera.thin_lens import setup_camera
    >>> from mcray.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(camera.image_width, camera.image_height,
    ...                     camera.samples_per_pixel, camera.max_depth)
    >>> for row in range(camera.image_height):
    ...     render_scanline(row, seed=0)
"""

import math
from collections.abc import Iterator

import numpy as np
import taichi as ti
import taichi.math as tm

from mcray.camera.thin_lens import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, get_ray
from mcray.core.interval import interval_clamp, make_interval
from mcray.core.ray import Ray, make_ray
from mcray.core.sampler import seed_rng
from mcray.materials.dielectric import scatter_dielectric_by_id
from mcray.materials.lambertian import scatter_lambertian_by_id
from mcray.materials.metal import scatter_metal_by_id
from mcray.scene.intersection import intersect_scene
from mcray.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Smallest accepted hit distance, keeps bounced rays off their own surface
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints
SKY_BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
SKY_TOP_COLOR = vec3(0.5, 0.7, 1.0)

# Upper clamp of a gamma-encoded channel before quantization
MAX_INTENSITY = 0.999


# =============================================================================
# Render Target (Image Buffers)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_samples_per_pixel = ti.field(dtype=ti.i32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())

# Averaged linear color per pixel, indexed [row, column], row 0 at the top
_linear_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Encoded 8-bit color per pixel, same layout
_pixel_buffer = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Result slot for single-pixel diagnostics
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(
    width: int,
    height: int,
    samples_per_pixel: int = 1,
    max_depth: int = 10,
) -> None:
    """Initialize the render target buffers and sampling settings.

    The buffers are preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH;
    only the top-left ``height`` x ``width`` region is used.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Maximum bounces per sample.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size, or the sampling settings are out of range.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must not be negative")

    _image_width[None] = width
    _image_height[None] = height
    _samples_per_pixel[None] = samples_per_pixel
    _max_depth[None] = max_depth
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the image buffers to zero."""
    _linear_buffer.fill(0.0)
    _pixel_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if hit front face, 0 if back face.
        state: Random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        Unknown material IDs absorb the ray (did_scatter == 0).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter, s = scatter_lambertian_by_id(
            type_index, normal, s
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, s = scatter_metal_by_id(
            type_index, incident_direction, normal, s
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter, s = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face, s
        )

    return scattered_direction, attenuation, did_scatter, s


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance: white at the horizon blending to blue overhead."""
    unit_direction = tm.normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_BOTTOM_COLOR + a * SKY_TOP_COLOR


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Follows the path for at most ``max_depth`` surface interactions. Each
    scatter multiplies the path throughput by the material's attenuation.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of bounces. 0 always yields black.
        state: Random stream state.

    Returns:
        A tuple of (color, next_state). The color is throughput * sky if the
        path escapes, black if it is absorbed or runs out of bounces.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    s = state

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), make_interval(T_MIN, T_MAX))

            if rec.hit == 0:
                color = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, s = scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face, s
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return color, s


@ti.func
def linear_to_gamma(linear_component: ti.f32) -> ti.f32:
    """Gamma 2 transform: square root of positive values, 0 otherwise."""
    result = 0.0
    if linear_component > 0.0:
        result = tm.sqrt(linear_component)
    return result


@ti.func
def encode_color(color: vec3) -> tm.ivec3:
    """Convert a linear color to 8-bit channels in [0, 255]."""
    intensity = make_interval(0.0, MAX_INTENSITY)
    encoded = tm.ivec3(0, 0, 0)
    for c in ti.static(range(3)):
        g = interval_clamp(intensity, linear_to_gamma(color[c]))
        encoded[c] = ti.cast(256.0 * g, ti.i32)
    return encoded


@ti.func
def sample_pixel(
    i: ti.i32,
    j: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
) -> vec3:
    """Average ``samples_per_pixel`` radiance estimates for pixel (i, j).

    Each sample draws from its own stream, seeded from the render seed, the
    row-major pixel index and the sample index.
    """
    pixel_index = j * width + i
    total = vec3(0.0, 0.0, 0.0)
    for sample in range(samples_per_pixel):
        state = seed_rng(seed, pixel_index, sample)
        origin, direction, state = get_ray(i, j, state)
        color, state = ray_color(make_ray(origin, direction), max_depth, state)
        total += color
    return total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Render Kernels
# =============================================================================


@ti.kernel
def _render_row(
    row: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
):
    """Render every pixel of one scanline in parallel."""
    for col in range(width):
        linear = sample_pixel(col, row, width, samples_per_pixel, max_depth, seed)
        _linear_buffer[row, col] = linear
        _pixel_buffer[row, col] = encode_color(linear)


@ti.kernel
def _render_single_pixel(
    i: ti.i32,
    j: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
):
    # One-iteration outer loop keeps the sample loop serial
    for _ in range(1):
        _probe_color[None] = sample_pixel(i, j, width, samples_per_pixel, max_depth, seed)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_scanline(row: int, seed: int = 0) -> None:
    """Render one row of the image into the render target.

    Args:
        row: Row index, 0 is the top of the image.
        seed: Render seed. Equal seeds give identical rows.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row < height:
        raise ValueError(f"Row {row} is outside the image (height {height})")

    _render_row(row, width, int(_samples_per_pixel[None]), int(_max_depth[None]), seed)


def render_pixel(i: int, j: int, seed: int = 0) -> tuple[float, float, float]:
    """Compute the averaged linear color of a single pixel.

    Does not write to the render target. Used for testing and debugging.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        seed: Render seed.

    Returns:
        Tuple of linear (R, G, B) values, before gamma encoding.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, _ = get_image_dimensions()
    _render_single_pixel(i, j, width, int(_samples_per_pixel[None]), int(_max_depth[None]), seed)
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_linear_image_numpy() -> np.ndarray:
    """Get the averaged linear colors as a NumPy array.

    Returns:
        Float32 array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return _linear_buffer.to_numpy()[:height, :width, :].astype(np.float32)


def get_pixels_numpy() -> np.ndarray:
    """Get the encoded 8-bit image as a NumPy array.

    Returns:
        Uint8 array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return _pixel_buffer.to_numpy()[:height, :width, :].astype(np.uint8)


def iter_pixels() -> Iterator[tuple[int, int, int]]:
    """Yield encoded pixels top row first, left to right."""
    pixels = get_pixels_numpy()
    for row in pixels:
        for r, g, b in row:
            yield int(r), int(g), int(b)
