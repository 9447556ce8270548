"""Scanline renderer driving a camera over the current scene.

The Renderer owns the render target for one camera and fills it one row at
a time, top to bottom, so callers can report progress between rows.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.core.renderer import Renderer
    >>> from mcray.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> renderer = Renderer(camera)
    >>> renderer.render(seed=7, callback=lambda done, total: print(total - done))
    >>> pixels = renderer.pixels()  # (height, width, 3) uint8
"""

import logging
import time
from collections.abc import Callable, Iterator

import numpy as np

from mcray.camera.thin_lens import ThinLensCamera, setup_camera
from mcray.core.integrator import (
    get_linear_image_numpy,
    get_pixels_numpy,
    iter_pixels,
    render_scanline,
    setup_render_target,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the current scene through a ThinLensCamera.

    Attributes:
        camera: The camera configuration being rendered.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, camera: ThinLensCamera) -> None:
        """Set up the camera and allocate the render target.

        Raises:
            ValueError: If the image does not fit the render target.
        """
        self.camera = camera
        self.width = camera.image_width
        self.height = camera.image_height
        self._rendered = False
        self._setup()

    def _setup(self) -> None:
        setup_camera(self.camera)
        setup_render_target(
            self.width,
            self.height,
            self.camera.samples_per_pixel,
            self.camera.max_depth,
        )

    def render(self, seed: int = 0, callback: ProgressCallback | None = None) -> np.ndarray:
        """Render the whole image, top scanline first.

        Args:
            seed: Render seed. The same scene, camera and seed always give
                byte-identical pixels.
            callback: Called as ``callback(rows_done, height)`` after each
                scanline.

        Returns:
            The encoded image, uint8 array of shape (height, width, 3).
        """
        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d",
            self.width,
            self.height,
            self.camera.samples_per_pixel,
            self.camera.max_depth,
        )
        start = time.perf_counter()

        # Camera and render target are module-level state shared by all renderers
        self._setup()

        for row in range(self.height):
            render_scanline(row, seed)
            if callback is not None:
                callback(row + 1, self.height)

        self._rendered = True
        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return self.pixels()

    def _check_rendered(self) -> None:
        if not self._rendered:
            raise RuntimeError("Nothing rendered yet. Call render() first.")

    def pixels(self) -> np.ndarray:
        """Encoded image as a uint8 array of shape (height, width, 3)."""
        self._check_rendered()
        return get_pixels_numpy()

    def iter_pixels(self) -> Iterator[tuple[int, int, int]]:
        """Yield encoded pixels top row first, left to right."""
        self._check_rendered()
        return iter_pixels()

    def linear_image(self) -> np.ndarray:
        """Averaged linear colors as a float32 array of shape (height, width, 3)."""
        self._check_rendered()
        return get_linear_image_numpy()
