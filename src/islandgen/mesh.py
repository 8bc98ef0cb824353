"""Surface mesh construction from a height field.

The mesh is y-up: grid column x maps to world x, grid row y maps to world z,
and height maps to world y.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import MeshConfig
from .exceptions import HeightFieldContractError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IslandMesh:
    """Triangle mesh over a resolution x resolution vertex grid.

    Vertex ``y * resolution + x`` corresponds to height field cell [y, x].
    ``triangles`` is a flat index list, three entries per triangle.
    ``tangents`` carries handedness in its fourth component.
    """

    vertices: NDArray[np.float32]
    uvs: NDArray[np.float32]
    normals: NDArray[np.float32]
    tangents: NDArray[np.float32]
    triangles: NDArray[np.int32]
    bounds_min: NDArray[np.float32]
    bounds_max: NDArray[np.float32]

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3


def _check_height_field(height: ArrayLike | None) -> NDArray[np.float64]:
    if height is None:
        raise HeightFieldContractError("Height field is required")

    field = np.asarray(height, dtype=np.float64)
    if field.ndim != 2 or field.shape[0] != field.shape[1]:
        raise HeightFieldContractError(
            f"Height field must be a square 2D array, got shape {field.shape}"
        )
    if field.shape[0] < 2:
        raise HeightFieldContractError(
            f"Height field must be at least 2x2, got {field.shape[0]}x{field.shape[1]}"
        )
    if not np.all(np.isfinite(field)):
        raise HeightFieldContractError("Height field contains non-finite values")
    return field


def grid_triangles(resolution: int) -> NDArray[np.int32]:
    """Triangle indices for a resolution x resolution vertex grid.

    Quads are emitted row by row. Each quad with corners
    i0 = y * resolution + x, i1 = i0 + 1, i2 = i0 + resolution, i3 = i2 + 1
    becomes triangles (i0, i2, i1) and (i1, i2, i3).

    Returns:
        Flat index array of length 6 * (resolution - 1) ** 2.
    """
    quad_y, quad_x = np.mgrid[0 : resolution - 1, 0 : resolution - 1]
    i0 = quad_y * resolution + quad_x
    i1 = i0 + 1
    i2 = i0 + resolution
    i3 = i2 + 1
    return np.stack([i0, i2, i1, i1, i2, i3], axis=-1).reshape(-1).astype(np.int32)


def recalculate_normals(
    vertices: NDArray[np.floating],
    triangles: NDArray[np.integer],
) -> NDArray[np.float64]:
    """Area-weighted vertex normals.

    Each face contributes its unnormalized cross product (length proportional
    to its area) to its three corners; the sums are then normalized.
    """
    faces = triangles.reshape(-1, 3)
    p0 = vertices[faces[:, 0]].astype(np.float64)
    p1 = vertices[faces[:, 1]].astype(np.float64)
    p2 = vertices[faces[:, 2]].astype(np.float64)
    face_normals = np.cross(p1 - p0, p2 - p0)

    normals = np.zeros((len(vertices), 3), dtype=np.float64)
    for corner in range(3):
        np.add.at(normals, faces[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    up = np.array([0.0, 1.0, 0.0])
    return np.where(lengths > 0.0, normals / np.where(lengths > 0.0, lengths, 1.0), up)


def recalculate_tangents(
    vertices: NDArray[np.floating],
    normals: NDArray[np.floating],
    uvs: NDArray[np.floating],
    triangles: NDArray[np.integer],
) -> NDArray[np.float64]:
    """Per-vertex tangents from UV-space derivatives.

    Accumulates per-face s/t directions, orthogonalizes the s direction
    against the vertex normal, and stores handedness (+1 or -1) in w.
    Triangles with degenerate UVs contribute nothing.

    Returns:
        (vertex_count, 4) array.
    """
    faces = triangles.reshape(-1, 3)
    p0 = vertices[faces[:, 0]].astype(np.float64)
    p1 = vertices[faces[:, 1]].astype(np.float64)
    p2 = vertices[faces[:, 2]].astype(np.float64)
    uv0 = uvs[faces[:, 0]].astype(np.float64)
    uv1 = uvs[faces[:, 1]].astype(np.float64)
    uv2 = uvs[faces[:, 2]].astype(np.float64)

    edge1 = p1 - p0
    edge2 = p2 - p0
    duv1 = uv1 - uv0
    duv2 = uv2 - uv0

    det = duv1[:, 0] * duv2[:, 1] - duv2[:, 0] * duv1[:, 1]
    valid = np.abs(det) > 1e-12
    r = np.where(valid, 1.0 / np.where(valid, det, 1.0), 0.0)[:, np.newaxis]

    s_dir = (edge1 * duv2[:, 1:2] - edge2 * duv1[:, 1:2]) * r
    t_dir = (edge2 * duv1[:, 0:1] - edge1 * duv2[:, 0:1]) * r

    tan_s = np.zeros((len(vertices), 3), dtype=np.float64)
    tan_t = np.zeros((len(vertices), 3), dtype=np.float64)
    for corner in range(3):
        np.add.at(tan_s, faces[:, corner], s_dir)
        np.add.at(tan_t, faces[:, corner], t_dir)

    n = normals.astype(np.float64)
    tangent = tan_s - n * np.sum(n * tan_s, axis=1, keepdims=True)
    lengths = np.linalg.norm(tangent, axis=1, keepdims=True)
    fallback = np.array([1.0, 0.0, 0.0])
    tangent = np.where(lengths > 0.0, tangent / np.where(lengths > 0.0, lengths, 1.0), fallback)

    handedness = np.where(np.sum(np.cross(n, tangent) * tan_t, axis=1) < 0.0, -1.0, 1.0)
    return np.concatenate([tangent, handedness[:, np.newaxis]], axis=1)


def build_mesh(height: ArrayLike, config: MeshConfig) -> IslandMesh:
    """Build a full surface mesh from a square height field.

    Args:
        height: Height field indexed [y, x], values expected in [0, 1].
        config: Mesh parameters.

    Returns:
        Freshly built IslandMesh.

    Raises:
        HeightFieldContractError: If ``height`` is absent or malformed.
    """
    field = _check_height_field(height)
    resolution = field.shape[0]
    heights01 = np.clip(field, 0.0, 1.0)

    step = config.world_size / (resolution - 1)
    offset = -config.world_size * 0.5

    cells = np.arange(resolution, dtype=np.float64)
    grid_x, grid_y = np.meshgrid(cells, cells)

    vertices = np.stack(
        [
            offset + grid_x * step,
            heights01 * config.max_height,
            offset + grid_y * step,
        ],
        axis=-1,
    ).reshape(-1, 3)
    uvs = np.stack(
        [grid_x / (resolution - 1), grid_y / (resolution - 1)], axis=-1
    ).reshape(-1, 2)
    triangles = grid_triangles(resolution)

    normals = recalculate_normals(vertices, triangles)
    tangents = recalculate_tangents(vertices, normals, uvs, triangles)

    logger.debug(
        f"Built mesh: {len(vertices)} vertices, {len(triangles) // 3} triangles"
    )

    return IslandMesh(
        vertices=vertices.astype(np.float32),
        uvs=uvs.astype(np.float32),
        normals=normals.astype(np.float32),
        tangents=tangents.astype(np.float32),
        triangles=triangles,
        bounds_min=vertices.min(axis=0).astype(np.float32),
        bounds_max=vertices.max(axis=0).astype(np.float32),
    )


class MeshBuilder:
    """Builds surface meshes with a fixed set of mesh parameters."""

    def __init__(self, config: MeshConfig):
        self.config = config

    def build(self, height: ArrayLike) -> IslandMesh:
        return build_mesh(height, self.config)
