"""Grayscale preview images of height fields."""

from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike
from PIL import Image


def render_preview(height: ArrayLike) -> Image.Image:
    """Render a height field as an 8-bit grayscale image.

    Row y of the field becomes image row y; 0 is black, 1 is white.
    """
    field = np.clip(np.asarray(height, dtype=np.float64), 0.0, 1.0)
    pixels = np.round(field * 255.0).astype(np.uint8)
    return Image.fromarray(pixels)


def save_preview(height: ArrayLike, path: Path) -> None:
    """Write a grayscale PNG preview of ``height`` to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    render_preview(height).save(path)
