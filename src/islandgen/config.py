"""Island generation configuration models."""

import logging
import math
import tomllib
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Smallest accepted value for any parameter used as a divisor.
MIN_DIVISOR = 1e-6

# Noise offsets are drawn from [-NOISE_OFFSET_RANGE, NOISE_OFFSET_RANGE).
NOISE_OFFSET_RANGE = 10000.0

# Largest sample coordinate or octave amplitude sum a config may produce.
NOISE_MAGNITUDE_LIMIT = 1e300


def _require_divisor(value: float, name: str) -> float:
    if value < MIN_DIVISOR:
        raise ValueError(f"{name} must be at least {MIN_DIVISOR}, got {value}")
    return value


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)


class NoiseConfig(_FrozenModel):
    """Layered noise parameters."""

    scale: float = Field(default=50.0, description="Noise zoom, in grid cells per unit")
    octaves: int = Field(default=4, ge=0, description="Number of octaves (0 disables noise)")
    persistence: float = Field(default=0.5, description="Amplitude multiplier per octave")
    lacunarity: float = Field(default=2.0, ge=0.0, description="Frequency multiplier per octave")

    @field_validator("scale")
    @classmethod
    def _scale_is_divisor(cls, value: float) -> float:
        return _require_divisor(value, "scale")


class _RadialShape(_FrozenModel):
    radius: float = Field(default=1.0, description="Island radius in normalized units")

    @field_validator("radius")
    @classmethod
    def _radius_is_divisor(cls, value: float) -> float:
        return _require_divisor(value, "radius")


class CircleShape(_RadialShape):
    """Single round island."""

    kind: Literal["circle"] = "circle"


class DonutShape(_RadialShape):
    """Ring island with a central lagoon."""

    kind: Literal["donut"] = "donut"
    inner_radius: float = Field(default=0.4, description="Radius of the central hole")

    @field_validator("inner_radius")
    @classmethod
    def _inner_radius_is_divisor(cls, value: float) -> float:
        return _require_divisor(value, "inner_radius")


class CrescentShape(_RadialShape):
    """Circle with an offset circle carved out of it."""

    kind: Literal["crescent"] = "crescent"
    bend_amount: float = Field(default=0.5, description="Offset of the carving circle along x")
    crescent_center_shift: float = Field(
        default=0.0, description="Shift applied to x before both circles are evaluated"
    )


class ArchipelagoShape(_RadialShape):
    """Several sub-islands evenly spaced on a ring."""

    kind: Literal["archipelago"] = "archipelago"
    island_count: int = Field(default=3, ge=1, description="Number of sub-islands")
    archipelago_spread: float = Field(
        default=0.5, ge=0.0, description="Radius of the ring the sub-islands sit on"
    )


class NoiseWarpedShape(_RadialShape):
    """Circle evaluated at noise-displaced coordinates."""

    kind: Literal["noise_warped"] = "noise_warped"
    warp_frequency: float = Field(default=3.0, ge=0.0, description="Warp noise frequency")
    warp_strength: float = Field(default=0.2, description="Warp displacement scale")


class IrregularShape(_RadialShape):
    """Circle whose radius is jittered by noise."""

    kind: Literal["irregular"] = "irregular"
    irregular_frequency: float = Field(
        default=3.0, ge=0.0, description="Radius jitter noise frequency"
    )
    irregular_amount: float = Field(default=0.3, description="Radius jitter scale")


ShapeConfig = Annotated[
    Union[
        CircleShape,
        DonutShape,
        CrescentShape,
        ArchipelagoShape,
        NoiseWarpedShape,
        IrregularShape,
    ],
    Field(discriminator="kind"),
]

SHAPE_KINDS = (
    "circle",
    "donut",
    "crescent",
    "archipelago",
    "noise_warped",
    "irregular",
)


class HeightConfig(_FrozenModel):
    """Height shaping parameters."""

    peak_sharpness: float = Field(
        default=1.5, ge=0.0, description="Exponent applied to noise; higher = pointier peaks"
    )
    height_multiplier: float = Field(default=1.0, description="Overall height scale")
    base_elevation: float = Field(default=0.0, description="Lifts or lowers the entire island")


class ShoreConfig(_FrozenModel):
    """Beach and cliff mask parameters."""

    water_level: float = Field(default=0.2, description="Height of the water surface")
    beach_width: float = Field(
        default=0.05, description="Height band above water level over which beach fades out"
    )
    cliff_slope_threshold: float = Field(
        default=0.1, ge=0.0, lt=1.0, description="Slope at which cliffs start to appear"
    )
    cliff_mode: Literal["raster", "full_field"] = Field(
        default="raster",
        description=(
            "raster: gradient reads the partially filled field in raster order; "
            "full_field: gradient over the completed height field"
        ),
    )

    @field_validator("beach_width")
    @classmethod
    def _beach_width_is_divisor(cls, value: float) -> float:
        return _require_divisor(value, "beach_width")


class MeshConfig(_FrozenModel):
    """Surface mesh parameters."""

    world_size: float = Field(default=512.0, gt=0.0, description="Mesh extent along x and z")
    max_height: float = Field(default=100.0, ge=0.0, description="Elevation of a height of 1.0")


class GenerationConfig(_FrozenModel):
    """Complete island generation configuration."""

    resolution: int = Field(default=256, ge=2, description="Grid size (resolution x resolution)")
    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    shape: ShapeConfig = Field(default_factory=CircleShape)
    height: HeightConfig = Field(default_factory=HeightConfig)
    shore: ShoreConfig = Field(default_factory=ShoreConfig)
    mesh: MeshConfig = Field(default_factory=MeshConfig)

    @model_validator(mode="after")
    def _noise_stays_finite(self) -> "GenerationConfig":
        coordinate, amplitude = noise_extents(self.noise, self.resolution)
        if not (coordinate < NOISE_MAGNITUDE_LIMIT and amplitude < NOISE_MAGNITUDE_LIMIT):
            raise ValueError(
                f"Noise with octaves={self.noise.octaves}, "
                f"lacunarity={self.noise.lacunarity}, persistence={self.noise.persistence} "
                f"and scale={self.noise.scale} overflows at resolution {self.resolution}"
            )
        return self


def noise_extents(noise: NoiseConfig, resolution: int) -> tuple[float, float]:
    """Upper bounds on the values the octave loop produces.

    Args:
        noise: Noise parameters.
        resolution: Grid size the noise is sampled over.

    Returns:
        (largest sample coordinate magnitude, largest octave sum magnitude).
        Either is ``math.inf`` if it overflows a float.
    """
    top_octave = max(noise.octaves - 1, 0)
    persistence = abs(noise.persistence)
    try:
        frequency = math.pow(noise.lacunarity, top_octave) if noise.lacunarity > 1.0 else 1.0
        amplitude = math.pow(persistence, top_octave) if persistence > 1.0 else 1.0
    except OverflowError:
        return math.inf, math.inf

    coordinate = (resolution + NOISE_OFFSET_RANGE) / noise.scale * frequency
    return coordinate, amplitude * noise.octaves


def parse_config(data: Mapping[str, Any]) -> GenerationConfig:
    """Build a GenerationConfig from a plain mapping.

    An unrecognized shape ``kind`` falls back to a circle (keeping its radius,
    if any). Every other validation failure is fatal.

    Args:
        data: Nested mapping as read from TOML or JSON.

    Returns:
        Validated GenerationConfig.

    Raises:
        ConfigurationError: If the mapping does not describe a valid config.
    """
    data = dict(data)
    shape = data.get("shape")
    if isinstance(shape, Mapping):
        kind = shape.get("kind", "circle")
        if "kind" not in shape:
            data["shape"] = {**shape, "kind": kind}
        elif kind not in SHAPE_KINDS:
            logger.warning(f"Unknown shape kind {kind!r}, falling back to circle")
            fallback: dict[str, Any] = {"kind": "circle"}
            if "radius" in shape:
                fallback["radius"] = shape["radius"]
            data["shape"] = fallback

    try:
        return GenerationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid island configuration: {e}") from e


def load_config(config_path: Path) -> GenerationConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed GenerationConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the TOML is malformed or fails validation.
    """
    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed TOML in {config_path}: {e}") from e
    return parse_config(data)
