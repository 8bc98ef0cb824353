"""Post-generation validation and terrain statistics."""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from .mesh import IslandMesh

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of island validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_island(
    height: NDArray[np.float32],
    beach: NDArray[np.float32],
    cliff: NDArray[np.float32],
    mesh: IslandMesh,
) -> ValidationResult:
    """Validate generated fields and mesh against their invariants.

    Args:
        height: Height field.
        beach: Beach mask.
        cliff: Cliff mask.
        mesh: Mesh built from ``height``.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()
    resolution = height.shape[0]

    # Check 1: Fields are square, same shape, and within [0, 1]
    for name, field in (("height", height), ("beach", beach), ("cliff", cliff)):
        _check_unit_field(name, field, resolution, result)

    # Check 2: Vertex and index counts
    _check_mesh_counts(mesh, resolution, result)

    # Check 3: Every index refers to a vertex
    _check_triangle_indices(mesh, result)

    # Check 4: Normals are unit length
    _check_normals(mesh, result)

    # Check 5: Something is above water
    if np.all(beach >= 1.0):
        result.add_warning("No cells above water level; island is fully submerged")

    if result.passed:
        logger.info("Island validation passed")
    else:
        logger.warning(f"Island validation failed with {len(result.errors)} errors")
        for error in result.errors:
            logger.error(f"  - {error}")

    for warning in result.warnings:
        logger.warning(f"  - {warning}")

    return result


def _check_unit_field(
    name: str,
    field: NDArray[np.float32],
    resolution: int,
    result: ValidationResult,
) -> None:
    """Check shape and [0, 1] range of a field."""
    if field.shape != (resolution, resolution):
        result.add_error(
            f"{name} has shape {field.shape}, expected ({resolution}, {resolution})"
        )
        return

    if not np.all(np.isfinite(field)):
        result.add_error(f"{name} contains non-finite values")
        return

    out_of_range = int(np.sum((field < 0.0) | (field > 1.0)))
    if out_of_range > 0:
        result.add_error(f"{name} has {out_of_range} values outside [0, 1]")


def _check_mesh_counts(
    mesh: IslandMesh,
    resolution: int,
    result: ValidationResult,
) -> None:
    """Check vertex, UV, normal and index counts."""
    expected_vertices = resolution * resolution
    expected_indices = 6 * (resolution - 1) ** 2

    for name, array in (
        ("vertices", mesh.vertices),
        ("uvs", mesh.uvs),
        ("normals", mesh.normals),
        ("tangents", mesh.tangents),
    ):
        if len(array) != expected_vertices:
            result.add_error(f"Mesh has {len(array)} {name}, expected {expected_vertices}")

    if len(mesh.triangles) != expected_indices:
        result.add_error(
            f"Mesh has {len(mesh.triangles)} indices, expected {expected_indices}"
        )


def _check_triangle_indices(mesh: IslandMesh, result: ValidationResult) -> None:
    """Check every triangle index is in range."""
    if len(mesh.triangles) == 0:
        return
    bad = int(np.sum((mesh.triangles < 0) | (mesh.triangles >= mesh.vertex_count)))
    if bad > 0:
        result.add_error(f"{bad} triangle indices out of range")


def _check_normals(mesh: IslandMesh, result: ValidationResult) -> None:
    """Check normals are finite unit vectors."""
    lengths = np.linalg.norm(mesh.normals, axis=1)
    if not np.all(np.isfinite(lengths)):
        result.add_error("Mesh normals contain non-finite values")
    elif not np.allclose(lengths, 1.0, atol=1e-4):
        result.add_warning("Some mesh normals are not unit length")


def count_islands(
    height: NDArray[np.float32],
    water_level: float,
) -> int:
    """Count 8-connected land components above ``water_level``."""
    land_mask = height > water_level
    structure = ndimage.generate_binary_structure(2, 2)
    _, num_features = ndimage.label(land_mask, structure=structure)
    return int(num_features)
