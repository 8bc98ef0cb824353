"""Procedural island generation package.

Generates seeded island height fields from layered noise and a parametric
silhouette mask, derives beach and cliff masks, and builds a triangulated
surface mesh from the result.
"""

from .config import GenerationConfig, load_config, parse_config
from .exceptions import ConfigurationError, HeightFieldContractError, IslandGenError
from .generator import IslandGenerator, IslandResult, generate_island
from .heightmap import HeightCompositor, HeightmapResult, compose_heightmap
from .mesh import IslandMesh, MeshBuilder, build_mesh
from .noise import NoiseField, generate_noise_field
from .shapes import ShapeMask, get_mask
from .validation import ValidationResult, validate_island

__all__ = [
    "ConfigurationError",
    "GenerationConfig",
    "HeightCompositor",
    "HeightFieldContractError",
    "HeightmapResult",
    "IslandGenError",
    "IslandGenerator",
    "IslandMesh",
    "IslandResult",
    "MeshBuilder",
    "NoiseField",
    "ShapeMask",
    "ValidationResult",
    "build_mesh",
    "compose_heightmap",
    "generate_island",
    "generate_noise_field",
    "get_mask",
    "load_config",
    "parse_config",
    "validate_island",
]
