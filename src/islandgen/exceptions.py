"""Custom exceptions for island generation."""


class IslandGenError(Exception):
    """Base exception for island generation errors."""

    pass


class ConfigurationError(IslandGenError, ValueError):
    """Raised when a configuration file or mapping fails validation."""

    pass


class HeightFieldContractError(IslandGenError):
    """Raised when a height field handed to the mesh builder is absent or malformed."""

    pass
