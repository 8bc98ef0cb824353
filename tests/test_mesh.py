"""Tests for surface mesh construction."""

import numpy as np
import pytest

from islandgen.config import MeshConfig
from islandgen.exceptions import HeightFieldContractError
from islandgen.mesh import MeshBuilder, build_mesh, grid_triangles


@pytest.fixture
def ramp_height() -> np.ndarray:
    """5x5 field rising along x."""
    return np.tile(np.linspace(0.0, 0.8, 5, dtype=np.float32), (5, 1))


class TestGridTriangles:
    """Tests for index generation."""

    @pytest.mark.parametrize("resolution", [2, 3, 10])
    def test_index_count(self, resolution: int) -> None:
        """6 * (R - 1)^2 indices."""
        assert len(grid_triangles(resolution)) == 6 * (resolution - 1) ** 2

    def test_first_quad_winding(self) -> None:
        """Quad corners map to (i0, i2, i1) and (i1, i2, i3)."""
        resolution = 4
        triangles = grid_triangles(resolution)
        np.testing.assert_array_equal(triangles[:6], [0, 4, 1, 1, 4, 5])

    def test_row_major_quad_order(self) -> None:
        """Quads advance along x before y."""
        triangles = grid_triangles(3)
        # Second quad is (x=1, y=0), third is (x=0, y=1).
        np.testing.assert_array_equal(triangles[6:12], [1, 4, 2, 2, 4, 5])
        np.testing.assert_array_equal(triangles[12:18], [3, 6, 4, 4, 6, 7])

    def test_indices_in_range(self) -> None:
        """Every index refers to a vertex."""
        triangles = grid_triangles(7)
        assert triangles.min() == 0
        assert triangles.max() == 7 * 7 - 1


class TestBuildMesh:
    """Tests for mesh construction."""

    @pytest.mark.parametrize("resolution", [2, 5, 16])
    def test_counts(self, resolution: int) -> None:
        """R^2 vertices, UVs, normals and tangents; 2 (R - 1)^2 triangles."""
        mesh = build_mesh(np.zeros((resolution, resolution)), MeshConfig())
        assert mesh.vertex_count == resolution * resolution
        assert len(mesh.uvs) == resolution * resolution
        assert len(mesh.normals) == resolution * resolution
        assert mesh.tangents.shape == (resolution * resolution, 4)
        assert mesh.triangle_count == 2 * (resolution - 1) ** 2
        assert len(mesh.triangles) == 6 * (resolution - 1) ** 2

    def test_grid_is_centered(self, ramp_height: np.ndarray) -> None:
        """Corners sit at +-world_size / 2 on x and z."""
        mesh = build_mesh(ramp_height, MeshConfig(world_size=100.0, max_height=10.0))
        np.testing.assert_allclose(mesh.vertices[0, [0, 2]], [-50.0, -50.0])
        np.testing.assert_allclose(mesh.vertices[-1, [0, 2]], [50.0, 50.0])
        np.testing.assert_allclose(mesh.vertices[1, 0] - mesh.vertices[0, 0], 25.0)

    def test_vertex_elevation(self, ramp_height: np.ndarray) -> None:
        """Vertex y * R + x has elevation height[y, x] * max_height."""
        mesh = build_mesh(ramp_height, MeshConfig(world_size=100.0, max_height=10.0))
        elevations = mesh.vertices[:, 1].reshape(5, 5)
        np.testing.assert_allclose(elevations, ramp_height * 10.0, rtol=1e-6)

    def test_heights_clamped(self) -> None:
        """Heights outside [0, 1] are clamped before scaling."""
        height = np.array([[-0.5, 0.5], [1.5, 1.0]])
        mesh = build_mesh(height, MeshConfig(max_height=2.0))
        np.testing.assert_allclose(mesh.vertices[:, 1], [0.0, 1.0, 2.0, 2.0])

    def test_uvs(self) -> None:
        """UV = (x / (R - 1), y / (R - 1))."""
        mesh = build_mesh(np.zeros((3, 3)), MeshConfig())
        np.testing.assert_allclose(mesh.uvs[0], [0.0, 0.0])
        np.testing.assert_allclose(mesh.uvs[1], [0.5, 0.0])
        np.testing.assert_allclose(mesh.uvs[3], [0.0, 0.5])
        np.testing.assert_allclose(mesh.uvs[8], [1.0, 1.0])

    def test_flat_normals_point_up(self) -> None:
        """The triangle winding gives +y normals on flat ground."""
        mesh = build_mesh(np.full((4, 4), 0.3), MeshConfig())
        np.testing.assert_allclose(mesh.normals, np.tile([0.0, 1.0, 0.0], (16, 1)), atol=1e-6)

    def test_flat_tangents_follow_u(self) -> None:
        """Tangents align with increasing u (world +x) on flat ground."""
        mesh = build_mesh(np.zeros((4, 4)), MeshConfig())
        np.testing.assert_allclose(mesh.tangents[:, :3], np.tile([1.0, 0.0, 0.0], (16, 1)), atol=1e-6)
        assert set(np.unique(mesh.tangents[:, 3])) <= {-1.0, 1.0}

    def test_ramp_normals_lean_downhill(self, ramp_height: np.ndarray) -> None:
        """A field rising along x has normals tilted towards -x."""
        mesh = build_mesh(ramp_height, MeshConfig(world_size=4.0, max_height=4.0))
        assert np.all(mesh.normals[:, 0] < 0.0)
        assert np.all(mesh.normals[:, 1] > 0.0)
        np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-6)

    def test_tangents_orthogonal_to_normals(self, ramp_height: np.ndarray) -> None:
        """Tangents are unit length and perpendicular to normals."""
        mesh = build_mesh(ramp_height, MeshConfig(world_size=4.0, max_height=4.0))
        tangents = mesh.tangents[:, :3]
        np.testing.assert_allclose(np.linalg.norm(tangents, axis=1), 1.0, atol=1e-5)
        np.testing.assert_allclose(np.sum(tangents * mesh.normals, axis=1), 0.0, atol=1e-5)

    def test_bounds(self, ramp_height: np.ndarray) -> None:
        """Bounds enclose every vertex."""
        mesh = build_mesh(ramp_height, MeshConfig(world_size=10.0, max_height=5.0))
        np.testing.assert_allclose(mesh.bounds_min, [-5.0, 0.0, -5.0])
        np.testing.assert_allclose(mesh.bounds_max, [5.0, 4.0, 5.0], rtol=1e-6)

    def test_idempotent(self, ramp_height: np.ndarray) -> None:
        """Two builds from identical inputs are identical."""
        config = MeshConfig(world_size=64.0, max_height=8.0)
        a = build_mesh(ramp_height, config)
        b = build_mesh(ramp_height, config)
        assert a.vertices.tobytes() == b.vertices.tobytes()
        assert a.uvs.tobytes() == b.uvs.tobytes()
        assert a.triangles.tobytes() == b.triangles.tobytes()
        assert a.normals.tobytes() == b.normals.tobytes()

    def test_builder_matches_function(self, ramp_height: np.ndarray) -> None:
        """MeshBuilder.build is the functional form."""
        config = MeshConfig(world_size=32.0)
        np.testing.assert_array_equal(
            MeshBuilder(config).build(ramp_height).vertices,
            build_mesh(ramp_height, config).vertices,
        )


class TestHeightFieldContract:
    """Tests for malformed height field rejection."""

    def test_none_rejected(self) -> None:
        """An absent field is a contract error."""
        with pytest.raises(HeightFieldContractError):
            build_mesh(None, MeshConfig())

    @pytest.mark.parametrize(
        "height",
        [
            np.zeros(9),
            np.zeros((3, 4)),
            np.zeros((1, 1)),
            np.zeros((2, 2, 2)),
        ],
        ids=["1d", "non-square", "too-small", "3d"],
    )
    def test_bad_shapes_rejected(self, height: np.ndarray) -> None:
        """Only square 2D fields of at least 2x2 are accepted."""
        with pytest.raises(HeightFieldContractError):
            build_mesh(height, MeshConfig())

    def test_non_finite_rejected(self) -> None:
        """NaN heights are a contract error."""
        height = np.zeros((3, 3))
        height[1, 1] = np.nan
        with pytest.raises(HeightFieldContractError):
            build_mesh(height, MeshConfig())
