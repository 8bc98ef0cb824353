"""Island generation orchestration.

Components are wired explicitly: the generator owns one NoiseField, one
ShapeMask, one HeightCompositor and one MeshBuilder, and every call to
:meth:`IslandGenerator.regenerate` returns freshly allocated output.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .config import GenerationConfig
from .heightmap import HeightCompositor
from .mesh import IslandMesh, MeshBuilder
from .noise import NoiseField
from .shapes import ShapeMask
from .validation import count_islands

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IslandResult:
    """Everything produced by one generation call."""

    height: NDArray[np.float32]
    beach: NDArray[np.float32]
    cliff: NDArray[np.float32]
    mesh: IslandMesh
    seed: int
    config: GenerationConfig


class IslandGenerator:
    """Generates islands for a fixed configuration."""

    def __init__(self, config: GenerationConfig):
        self.config = config
        self.noise_field = NoiseField(config.noise)
        self.shape_mask = ShapeMask(config.shape)
        self.compositor = HeightCompositor(
            self.noise_field,
            self.shape_mask,
            config.height,
            config.shore,
        )
        self.mesh_builder = MeshBuilder(config.mesh)

    def regenerate(self, seed: int) -> IslandResult:
        """Generate height, beach and cliff fields and the surface mesh.

        Args:
            seed: Random seed.

        Returns:
            IslandResult owned by the caller.
        """
        resolution = self.config.resolution
        logger.info(
            f"Generating {resolution}x{resolution} {self.config.shape.kind} island "
            f"with seed {seed}"
        )

        logger.info("Stage A: Compositing height field...")
        heightmap = self.compositor.compose(resolution, seed)

        logger.info("Stage B: Building mesh...")
        mesh = self.mesh_builder.build(heightmap.height)

        _log_island_stats(
            heightmap.height,
            heightmap.beach,
            heightmap.cliff,
            self.config.shore.water_level,
        )

        return IslandResult(
            height=heightmap.height,
            beach=heightmap.beach,
            cliff=heightmap.cliff,
            mesh=mesh,
            seed=seed,
            config=self.config,
        )


def generate_island(config: GenerationConfig, seed: int) -> IslandResult:
    """Generate one island from ``config`` and ``seed``."""
    return IslandGenerator(config).regenerate(seed)


def _log_island_stats(
    height: NDArray[np.float32],
    beach: NDArray[np.float32],
    cliff: NDArray[np.float32],
    water_level: float,
) -> None:
    """Log island generation statistics."""
    total = height.size
    land_fraction = float(np.mean(height > water_level))

    logger.info(f"Island stats ({total:,} cells):")
    logger.info(f"  height: min {height.min():.3f}, max {height.max():.3f}")
    logger.info(f"  land above water: {land_fraction:.1%}")
    logger.info(f"  beach coverage: {float(np.mean(beach > 0.0)):.1%}")
    logger.info(f"  cliff coverage: {float(np.mean(cliff > 0.0)):.1%}")
    logger.info(f"  islands: {count_islands(height, water_level)}")
