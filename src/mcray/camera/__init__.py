"""Camera module: thin-lens camera configuration and primary ray generation."""

from .thin_lens import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    ThinLensCamera,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
