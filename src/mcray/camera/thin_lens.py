"""Thin-lens camera model for primary ray generation.

This module implements a positionable camera with depth of field. The camera
supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios, with the image height derived from the width
- Jittered sub-pixel sampling for anti-aliasing
- A defocus disk (lens aperture) for depth-of-field blur

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the focus plane, ``focus_dist`` in front of the eye.
Pixel (0, 0) is the top-left pixel; rows grow downward. A ``defocus_angle``
of zero turns the lens into a pinhole: every ray starts at the eye point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=400,
    ...     lookfrom=(-2.0, 2.0, 1.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vfov=20.0,
    ...     defocus_angle=10.0,
    ...     focus_dist=3.4,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     origin, direction, state = get_ray(0, 0, state)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from mcray.core.sampler import random_f32, random_in_unit_disk
from mcray.core.vec3 import vec3

# Largest image the preallocated render target holds
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (depth of field) camera.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        image_width: Rendered image width in pixels, at most MAX_IMAGE_WIDTH.
            The derived height must not exceed MAX_IMAGE_HEIGHT.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical field of view in degrees, in (0, 180).
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            0 disables depth of field.
        focus_dist: Distance from the eye to the plane of perfect focus.
            None means the distance from lookfrom to lookat.
        jitter: If False, every sample goes through the pixel center.

    Raises:
        ValueError: On construction, if any parameter is out of range.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float | None = None
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive.")
        if self.image_width <= 0:
            raise ValueError(f"image_width = {self.image_width} must be positive.")
        if self.image_height < 1:
            raise ValueError(
                f"image_width = {self.image_width} with aspect_ratio = "
                f"{self.aspect_ratio} gives an image with no rows."
            )
        if self.image_width > MAX_IMAGE_WIDTH or self.image_height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image size {self.image_width}x{self.image_height} exceeds the "
                f"maximum {MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}."
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel = {self.samples_per_pixel} must be at least 1."
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative.")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees.")
        if self.defocus_angle < 0.0:
            raise ValueError(f"defocus_angle = {self.defocus_angle} must not be negative.")

        view = np.subtract(self.lookfrom, self.lookat).astype(np.float64)
        view_length = float(np.linalg.norm(view))
        if view_length == 0.0:
            raise ValueError("lookfrom and lookat must be different points.")
        if np.linalg.norm(np.cross(self.vup, view)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction.")

        if self.focus_dist is None:
            self.focus_dist = view_length
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist = {self.focus_dist} must be positive.")

    @property
    def image_height(self) -> int:
        """Image height in pixels, floor of width / aspect_ratio."""
        return int(self.image_width / self.aspect_ratio)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Pixel grid on the focus plane
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # One pixel right
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # One pixel down

# Lens aperture
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())

# 1.0 for jittered samples, 0.0 to pin samples to pixel centers
_jitter_scale = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis, the pixel grid on the focus plane and
    the defocus disk from the camera parameters, and stores them in Taichi
    fields. This must be called before rendering.

    Args:
        camera: Camera configuration. Already validated on construction.
    """
    center = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)
    focus_dist = float(camera.focus_dist)

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * focus_dist
    viewport_width = viewport_height * (camera.image_width / camera.image_height)

    w = center - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Viewport edges: across the top, and down the left side
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / camera.image_width
    pixel_delta_v = viewport_v / camera.image_height

    viewport_upper_left = center - focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = focus_dist * math.tan(math.radians(camera.defocus_angle / 2.0))

    _camera_center[None] = center.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _defocus_disk_u[None] = (defocus_radius * u).tolist()
    _defocus_disk_v[None] = (defocus_radius * v).tolist()
    _defocus_angle[None] = camera.defocus_angle
    _jitter_scale[None] = 1.0 if camera.jitter else 0.0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def defocus_disk_sample(state: ti.u32):
    """Pick a random point on the lens disk around the camera center.

    Returns:
        A tuple of (point, next_state).
    """
    p, s = random_in_unit_disk(state)
    point = _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]
    return point, s


@ti.func
def get_ray(i: ti.i32, j: ti.i32, state: ti.u32):
    """Generate a camera ray for pixel column ``i`` of row ``j``.

    The ray targets a point jittered uniformly within [-0.5, 0.5) pixel
    around the pixel center. Its origin is the eye point for a pinhole
    camera, or a random point on the defocus disk otherwise.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        state: Random stream state.

    Returns:
        A tuple of (origin, direction, next_state). The direction is not
        normalized.
    """
    # Both offsets are drawn even with jitter disabled, so the stream
    # advances identically either way
    rx, s = random_f32(state)
    ry, s = random_f32(s)
    offset_x = (rx - 0.5) * _jitter_scale[None]
    offset_y = (ry - 0.5) * _jitter_scale[None]

    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(i, ti.f32) + offset_x) * _pixel_delta_u[None]
        + (ti.cast(j, ti.f32) + offset_y) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        origin, s = defocus_disk_sample(s)

    direction = pixel_sample - origin
    return origin, direction, s


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(vec) -> tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00_loc, pixel_delta_u,
        pixel_delta_v, defocus_disk_u, defocus_disk_v and defocus_angle.
    """
    return {
        "center": _as_tuple(_camera_center[None]),
        "u": _as_tuple(_camera_u[None]),
        "v": _as_tuple(_camera_v[None]),
        "w": _as_tuple(_camera_w[None]),
        "pixel00_loc": _as_tuple(_pixel00_loc[None]),
        "pixel_delta_u": _as_tuple(_pixel_delta_u[None]),
        "pixel_delta_v": _as_tuple(_pixel_delta_v[None]),
        "defocus_disk_u": _as_tuple(_defocus_disk_u[None]),
        "defocus_disk_v": _as_tuple(_defocus_disk_v[None]),
        "defocus_angle": float(_defocus_angle[None]),
    }
