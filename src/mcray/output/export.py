"""Image export utilities for rendered images.

This module writes encoded 8-bit pixel arrays to image files.

Supported formats:
    - PPM (plain-text P3, one pixel per line)
    - PNG (8-bit RGB via Pillow)

Pixel arrays have shape (height, width, 3), row 0 at the top of the image,
as returned by ``Renderer.pixels()``. I/O errors propagate to the caller.

Example:
    >>> from mcray.output.export import write_ppm
    >>> from mcray.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(camera)
    >>> write_ppm(renderer.render(), "output.ppm")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

PPM_MAX_VALUE = 255


def _as_pixel_array(pixels: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Validate an (height, width, 3) pixel array with channels in [0, 255]."""
    array = np.asarray(pixels)
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError(f"Expected pixels of shape (height, width, 3), got {array.shape}")
    if array.size and (array.min() < 0 or array.max() > PPM_MAX_VALUE):
        raise ValueError("Pixel channels must be in [0, 255]")
    return array.astype(np.uint8)


def format_ppm(pixels: npt.ArrayLike) -> str:
    """Format pixels as a plain-text P3 PPM document.

    The header is ``P3``, then ``<width> <height>``, then ``255``, each on its
    own line, followed by one ``r g b`` line per pixel, top row first, left
    to right.

    Args:
        pixels: Array of shape (height, width, 3) with channels in [0, 255].

    Returns:
        The PPM text, ending with a newline.

    Raises:
        ValueError: If the array has the wrong shape or channel range.
    """
    array = _as_pixel_array(pixels)
    height, width, _ = array.shape

    lines = ["P3", f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in array.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(pixels: npt.ArrayLike, filepath: str | os.PathLike[str]) -> None:
    """Write pixels to a plain-text P3 PPM file.

    Args:
        pixels: Array of shape (height, width, 3) with channels in [0, 255].
        filepath: Output file path.
    """
    text = format_ppm(pixels)
    with open(filepath, "w", encoding="ascii") as f:
        f.write(text)
    logger.info("Wrote %s", filepath)


def save_png(pixels: npt.ArrayLike, filepath: str | os.PathLike[str]) -> None:
    """Save pixels as an 8-bit RGB PNG file.

    Args:
        pixels: Array of shape (height, width, 3) with channels in [0, 255].
        filepath: Output file path (should end in .png).
    """
    array = _as_pixel_array(pixels)
    pil_image = PILImage.fromarray(array)
    pil_image.save(filepath)
    logger.info("Wrote %s", filepath)


def save_image(pixels: npt.ArrayLike, filepath: str | os.PathLike[str]) -> None:
    """Save pixels, picking PPM or PNG from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    extension = os.path.splitext(os.fspath(filepath))[1].lower()
    if extension == ".ppm":
        write_ppm(pixels, filepath)
    elif extension == ".png":
        save_png(pixels, filepath)
    else:
        raise ValueError(f"Unsupported output format: {extension!r} (use .ppm or .png)")
