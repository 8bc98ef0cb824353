"""Height compositing: noise shaped by the island mask, plus beach and cliff masks."""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .config import GenerationConfig, HeightConfig, ShoreConfig
from .noise import NoiseField, inverse_lerp
from .shapes import ShapeMask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeightmapResult:
    """Fields produced by one compositing pass, all indexed [y, x]."""

    height: NDArray[np.float32]
    beach: NDArray[np.float32]
    cliff: NDArray[np.float32]
    noise: NDArray[np.float32]
    shape_mask: NDArray[np.float32]


def shape_heights(
    noise: NDArray[np.float64],
    mask: NDArray[np.float64],
    config: HeightConfig,
) -> NDArray[np.float32]:
    """Combine noise and shape mask into clamped heights.

    Args:
        noise: Noise field in [0, 1].
        mask: Shape mask in [0, 1], same shape as ``noise``.
        config: Height shaping parameters.

    Returns:
        Height field in [0, 1].
    """
    shaped = np.power(noise, config.peak_sharpness)
    height = shaped * mask * config.height_multiplier + config.base_elevation
    return np.clip(height, 0.0, 1.0).astype(np.float32)


def compute_beach_mask(
    height: NDArray[np.float32],
    config: ShoreConfig,
) -> NDArray[np.float32]:
    """Beach membership: 1 at or below water level, 0 once ``beach_width`` above it."""
    water_distance = np.clip((height - config.water_level) / config.beach_width, 0.0, 1.0)
    return (1.0 - water_distance).astype(np.float32)


def gradient_neighbors(
    height: NDArray[np.float32],
    mode: str = "raster",
) -> tuple[NDArray[np.float32], ...]:
    """Return the (left, right, down, up) neighbor heights used for slope.

    Out-of-range neighbors take the cell's own height. In ``raster`` mode the
    neighbors are the values visible to a single y-outer, x-inner pass that
    writes each height just before reading its neighbors: left (x - 1) and
    down (y - 1) are already filled, right (x + 1) and up (y + 1) still hold
    zero. In ``full_field`` mode all four come from the completed field.

    Args:
        height: Height field indexed [y, x].
        mode: "raster" or "full_field".

    Returns:
        Four arrays shaped like ``height``.
    """
    left = height.copy()
    left[:, 1:] = height[:, :-1]
    down = height.copy()
    down[1:, :] = height[:-1, :]

    if mode == "raster":
        right = np.zeros_like(height)
        right[:, -1] = height[:, -1]
        up = np.zeros_like(height)
        up[-1, :] = height[-1, :]
    elif mode == "full_field":
        right = height.copy()
        right[:, :-1] = height[:, 1:]
        up = height.copy()
        up[:-1, :] = height[1:, :]
    else:
        raise ValueError(f"Unknown cliff mode: {mode!r}")

    return left, right, down, up


def compute_slope(
    height: NDArray[np.float32],
    mode: str = "raster",
) -> NDArray[np.float64]:
    """Four-neighbor finite-difference slope magnitude.

    Args:
        height: Height field indexed [y, x].
        mode: Neighbor source, see :func:`gradient_neighbors`.

    Returns:
        sqrt(dx^2 + dy^2) per cell.
    """
    left, right, down, up = gradient_neighbors(height, mode)
    dx = right.astype(np.float64) - left
    dy = up.astype(np.float64) - down
    return np.sqrt(dx * dx + dy * dy)


def compute_cliff_mask(
    height: NDArray[np.float32],
    config: ShoreConfig,
) -> NDArray[np.float32]:
    """Cliff membership: 0 below the slope threshold, 1 at slope 1, linear between."""
    slope = compute_slope(height, config.cliff_mode)
    return inverse_lerp(config.cliff_slope_threshold, 1.0, slope).astype(np.float32)


class HeightCompositor:
    """Composes a noise source and a shape mask into height, beach and cliff fields."""

    def __init__(
        self,
        noise_field: NoiseField,
        shape_mask: ShapeMask,
        height_config: HeightConfig,
        shore_config: ShoreConfig,
    ):
        self.noise_field = noise_field
        self.shape_mask = shape_mask
        self.height_config = height_config
        self.shore_config = shore_config

    def compose(self, resolution: int, seed: int) -> HeightmapResult:
        """Run one compositing pass.

        Args:
            resolution: Grid size.
            seed: Random seed for the noise field.

        Returns:
            Freshly allocated HeightmapResult.
        """
        noise = self.noise_field.generate(resolution, seed)
        mask = self.shape_mask.generate(resolution)

        height = shape_heights(noise, mask, self.height_config)
        beach = compute_beach_mask(height, self.shore_config)
        cliff = compute_cliff_mask(height, self.shore_config)

        logger.debug(
            f"Composed {resolution}x{resolution} heights: "
            f"min={height.min():.3f} max={height.max():.3f} "
            f"cliff_mode={self.shore_config.cliff_mode}"
        )

        return HeightmapResult(
            height=height,
            beach=beach,
            cliff=cliff,
            noise=noise.astype(np.float32),
            shape_mask=mask.astype(np.float32),
        )


def compose_heightmap(config: GenerationConfig, seed: int) -> HeightmapResult:
    """Compose height, beach and cliff fields for ``config`` and ``seed``."""
    compositor = HeightCompositor(
        NoiseField(config.noise),
        ShapeMask(config.shape),
        config.height,
        config.shore,
    )
    return compositor.compose(config.resolution, seed)
