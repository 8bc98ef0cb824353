"""Island silhouettes: per-coordinate shape masks for the six shape variants.

Every mask takes coordinates normalized to [-1, 1] across the grid and
returns membership in [0, 1]. Masks are total over all real inputs and
broadcast like numpy ufuncs, so they can be evaluated per cell or over a
whole grid at once.
"""

import math
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import (
    MIN_DIVISOR,
    ArchipelagoShape,
    CircleShape,
    CrescentShape,
    DonutShape,
    IrregularShape,
    NoiseWarpedShape,
    ShapeConfig,
)
from .noise import perlin_2d, smoothstep


def normalized_coordinates(
    resolution: int,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Map grid indices to [-1, 1], with the outer rows and columns at exactly +-1.

    Args:
        resolution: Grid size (>= 2).

    Returns:
        (x, y) arrays shaped (1, resolution) and (resolution, 1), ready to
        broadcast into a [y, x] grid.
    """
    coords = np.arange(resolution, dtype=np.float64) / (resolution - 1) * 2.0 - 1.0
    return coords[np.newaxis, :], coords[:, np.newaxis]


def circle_mask(x: ArrayLike, y: ArrayLike, radius: ArrayLike) -> NDArray[np.float64]:
    """Linear radial falloff: 1 at the origin, 0 at ``radius`` and beyond."""
    dist = np.hypot(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))
    return np.clip(1.0 - dist / radius, 0.0, 1.0)


def _circle(shape: CircleShape, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    return circle_mask(x, y, shape.radius)


def _donut(shape: DonutShape, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    outer = circle_mask(x, y, shape.radius)
    inner = circle_mask(x, y, shape.inner_radius)
    ring = np.clip(outer - inner, 0.0, 1.0)
    # Sharpen the ring's own edge.
    return ring * smoothstep(0.5, 1.0, ring)


def _crescent(shape: CrescentShape, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    centered_x = np.asarray(x, dtype=np.float64) + shape.crescent_center_shift
    main = circle_mask(centered_x, y, shape.radius)
    shifted = circle_mask(centered_x - shape.bend_amount, y, shape.radius)
    return np.clip(main - shifted, 0.0, 1.0)


def _archipelago(
    shape: ArchipelagoShape, x: ArrayLike, y: ArrayLike
) -> NDArray[np.float64]:
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    mask = np.zeros(np.broadcast_shapes(x.shape, y.shape), dtype=np.float64)

    for i in range(shape.island_count):
        angle = i * 2.0 * math.pi / shape.island_count
        center_x = math.cos(angle) * shape.archipelago_spread
        center_y = math.sin(angle) * shape.archipelago_spread
        # Union: overlapping islands do not brighten each other.
        mask = np.maximum(mask, circle_mask(x - center_x, y - center_y, shape.radius))

    return mask


def _noise_warped(
    shape: NoiseWarpedShape, x: ArrayLike, y: ArrayLike
) -> NDArray[np.float64]:
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    freq = shape.warp_frequency

    warp_x = (perlin_2d(x * freq, y * freq) * 2.0 - 1.0) * shape.warp_strength
    warp_y = (perlin_2d(y * freq, x * freq) * 2.0 - 1.0) * shape.warp_strength

    return circle_mask(x + warp_x, y + warp_y, shape.radius)


def _irregular(shape: IrregularShape, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    freq = shape.irregular_frequency

    jitter = (perlin_2d(x * freq, y * freq) - 0.5) * shape.irregular_amount
    radius = np.maximum(shape.radius + jitter, MIN_DIVISOR)

    return circle_mask(x, y, radius)


_MASK_FUNCTIONS: dict[str, Callable[..., NDArray[np.float64]]] = {
    "circle": _circle,
    "donut": _donut,
    "crescent": _crescent,
    "archipelago": _archipelago,
    "noise_warped": _noise_warped,
    "irregular": _irregular,
}


def get_mask(shape: ShapeConfig, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    """Evaluate the silhouette of ``shape`` at normalized coordinates.

    Args:
        shape: Shape variant and its parameters.
        x: Normalized x coordinates in [-1, 1] (other values are accepted).
        y: Normalized y coordinates in [-1, 1] (other values are accepted).

    Returns:
        Mask values in [0, 1], broadcast over ``x`` and ``y``.
    """
    return _MASK_FUNCTIONS[shape.kind](shape, x, y)


class ShapeMask:
    """Silhouette source for one configured shape variant."""

    def __init__(self, shape: ShapeConfig):
        self.shape = shape

    def evaluate(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
        return get_mask(self.shape, x, y)

    def generate(self, resolution: int) -> NDArray[np.float64]:
        """Evaluate the mask over a resolution x resolution grid, indexed [y, x]."""
        x, y = normalized_coordinates(resolution)
        return np.broadcast_to(self.evaluate(x, y), (resolution, resolution)).copy()
