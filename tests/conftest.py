"""Shared test fixtures for island generation tests."""

import pytest

from islandgen.config import (
    CircleShape,
    GenerationConfig,
    HeightConfig,
    NoiseConfig,
    ShoreConfig,
)


@pytest.fixture
def small_config() -> GenerationConfig:
    """32x32 config with default noise and a circle island."""
    return GenerationConfig(resolution=32, noise=NoiseConfig(scale=8.0))


@pytest.fixture
def flat_noise_config() -> GenerationConfig:
    """4x4 config with noise disabled (constant 0.5) and a wide circle.

    Heights stay well below the water level and slopes stay below the
    cliff threshold.
    """
    return GenerationConfig(
        resolution=4,
        noise=NoiseConfig(octaves=0),
        shape=CircleShape(radius=2.0),
        height=HeightConfig(peak_sharpness=1.0, height_multiplier=0.5, base_elevation=0.0),
        shore=ShoreConfig(water_level=0.3, beach_width=0.05, cliff_slope_threshold=0.4),
    )
