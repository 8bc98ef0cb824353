"""Noise functions for island generation.

Provides a fixed, continuous 2D gradient noise defined for all real inputs,
the seeded multi-octave NoiseField built on top of it, and shared remapping
helpers.
"""

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import NOISE_OFFSET_RANGE, NoiseConfig

logger = logging.getLogger(__name__)

OFFSET_RANGE = NOISE_OFFSET_RANGE

# Lattice hash table. RandomState is used because its stream is frozen across
# numpy releases, so the noise function never changes under an upgrade.
_PERMUTATION = np.random.RandomState(1337).permutation(256).astype(np.int64)
_PERM = np.concatenate([_PERMUTATION, _PERMUTATION])

# Eight gradient directions, indexed by hash & 7.
_GRAD_X = np.array([1.0, -1.0, 1.0, -1.0, 1.0, -1.0, 0.0, 0.0])
_GRAD_Y = np.array([1.0, 1.0, -1.0, -1.0, 0.0, 0.0, 1.0, -1.0])


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _grad(
    hashed: NDArray[np.int64], x: NDArray[np.float64], y: NDArray[np.float64]
) -> NDArray[np.float64]:
    g = hashed & 7
    return _GRAD_X[g] * x + _GRAD_Y[g] * y


def perlin_2d(x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    """Sample 2D gradient noise at arbitrary real coordinates.

    The function is fixed (not seeded), continuous, and broadcasts its
    arguments like any numpy ufunc. The lattice repeats every 256 units.

    Args:
        x: Sample x coordinates.
        y: Sample y coordinates.

    Returns:
        Noise values in [0, 1], with 0.5 at every lattice point.
    """
    x, y = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
    )

    x_floor = np.floor(x)
    y_floor = np.floor(y)
    xf = x - x_floor
    yf = y - y_floor
    xi = x_floor.astype(np.int64) & 255
    yi = y_floor.astype(np.int64) & 255

    u = _fade(xf)
    v = _fade(yf)

    aa = _PERM[_PERM[xi] + yi]
    ab = _PERM[_PERM[xi] + yi + 1]
    ba = _PERM[_PERM[xi + 1] + yi]
    bb = _PERM[_PERM[xi + 1] + yi + 1]

    x1 = lerp(_grad(aa, xf, yf), _grad(ba, xf - 1.0, yf), u)
    x2 = lerp(_grad(ab, xf, yf - 1.0), _grad(bb, xf - 1.0, yf - 1.0), u)
    value = lerp(x1, x2, v)

    return np.clip((value + 1.0) * 0.5, 0.0, 1.0)


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> NDArray[np.float64]:
    """Unclamped linear interpolation."""
    return a + (np.asarray(b) - a) * t


def inverse_lerp(a: float, b: float, value: ArrayLike) -> NDArray[np.float64]:
    """Clamped inverse linear interpolation of ``value`` from [a, b] to [0, 1].

    Returns 0 where ``a == b``.
    """
    value = np.asarray(value, dtype=np.float64)
    if a == b:
        return np.zeros_like(value)
    return np.clip((value - a) / (b - a), 0.0, 1.0)


def smoothstep(edge0: float, edge1: float, x: ArrayLike) -> NDArray[np.float64]:
    """Smooth Hermite interpolation between 0 and 1.

    Args:
        edge0: Lower edge of transition.
        edge1: Upper edge of transition.
        x: Input values.

    Returns:
        Smoothly interpolated values in [0, 1].
    """
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def seed_offsets(seed: int) -> tuple[float, float]:
    """Derive the two noise-space offsets for a seed.

    Both are drawn once from a generator initialized with ``seed``; they move
    the sampling window without changing the noise function itself.
    """
    rng = np.random.default_rng(seed)
    offset_x, offset_y = rng.uniform(-OFFSET_RANGE, OFFSET_RANGE, size=2)
    return float(offset_x), float(offset_y)


def sample_noise(
    config: NoiseConfig,
    offsets: tuple[float, float],
    x: ArrayLike,
    y: ArrayLike,
) -> NDArray[np.float64]:
    """Evaluate layered noise at grid cell coordinates.

    Each cell is independent of every other, so any subset of cells can be
    evaluated in any order.

    The octave sum is remapped from a nominal [-1, 1] to [0, 1] without
    renormalizing by the achievable amplitude, so values lean towards 0.5.

    Args:
        config: Noise parameters.
        offsets: (offset_x, offset_y) from :func:`seed_offsets`.
        x: Cell x indices (may be fractional).
        y: Cell y indices (may be fractional).

    Returns:
        Noise values in [0, 1].
    """
    offset_x, offset_y = offsets
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    total = np.zeros(np.broadcast_shapes(x.shape, y.shape), dtype=np.float64)
    amplitude = 1.0
    frequency = 1.0

    for _ in range(config.octaves):
        sample_x = (x + offset_x) / config.scale * frequency
        sample_y = (y + offset_y) / config.scale * frequency
        total += (perlin_2d(sample_x, sample_y) * 2.0 - 1.0) * amplitude
        amplitude *= config.persistence
        frequency *= config.lacunarity

    return inverse_lerp(-1.0, 1.0, total)


def generate_noise_field(
    resolution: int,
    config: NoiseConfig,
    seed: int,
) -> NDArray[np.float64]:
    """Generate a resolution x resolution layered noise field.

    Args:
        resolution: Grid size.
        config: Noise parameters.
        seed: Random seed.

    Returns:
        2D array indexed [y, x] with values in [0, 1].
    """
    offsets = seed_offsets(seed)
    logger.debug(
        f"Noise offsets for seed {seed}: ({offsets[0]:.3f}, {offsets[1]:.3f})"
    )
    cells = np.arange(resolution, dtype=np.float64)
    return sample_noise(config, offsets, cells[np.newaxis, :], cells[:, np.newaxis])


class NoiseField:
    """Seeded multi-octave noise source."""

    def __init__(self, config: NoiseConfig):
        self.config = config

    def generate(self, resolution: int, seed: int) -> NDArray[np.float64]:
        """Generate the field for ``seed``; see :func:`generate_noise_field`."""
        return generate_noise_field(resolution, self.config, seed)
