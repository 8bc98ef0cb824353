"""Command-line interface for island generation."""

import argparse
import logging
import time
from pathlib import Path

import structlog

from .config import SHAPE_KINDS, GenerationConfig, load_config, parse_config
from .exceptions import ConfigurationError


def _build_config(args: argparse.Namespace) -> GenerationConfig:
    """Load the base config and apply CLI overrides."""
    if args.config:
        config = load_config(Path(args.config))
    else:
        config = GenerationConfig()

    data = config.model_dump()
    if args.resolution is not None:
        data["resolution"] = args.resolution
    if args.shape is not None and args.shape != config.shape.kind:
        data["shape"] = {"kind": args.shape, "radius": config.shape.radius}
    return parse_config(data)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for island generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural island height field and mesh"
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path to a TOML generation config"
    )
    parser.add_argument(
        "--resolution", type=int, default=None, help="Grid resolution (overrides config)"
    )
    parser.add_argument(
        "--seed", type=int, default=12345, help="Random seed (default: 12345)"
    )
    parser.add_argument(
        "--shape",
        type=str,
        choices=SHAPE_KINDS,
        default=None,
        help="Island shape (overrides config)",
    )
    parser.add_argument(
        "--preview",
        type=str,
        default=None,
        help="Write a grayscale PNG of the height field to this path",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    logger = structlog.get_logger()

    # Import here to avoid slow startup for --help
    from .generator import generate_island
    from .preview import save_preview
    from .validation import validate_island

    try:
        config = _build_config(args)
    except (ConfigurationError, OSError) as e:
        logger.error("config_error", error=str(e))
        raise SystemExit(1)

    logger.info(
        "generation_starting",
        resolution=config.resolution,
        shape=config.shape.kind,
        seed=args.seed,
    )

    start_time = time.time()
    result = generate_island(config, args.seed)
    gen_time = time.time() - start_time

    validation = validate_island(result.height, result.beach, result.cliff, result.mesh)

    logger.info(
        "generation_complete",
        seconds=round(gen_time, 3),
        vertices=result.mesh.vertex_count,
        triangles=result.mesh.triangle_count,
        valid=validation.passed,
    )

    if args.preview:
        preview_path = Path(args.preview)
        save_preview(result.height, preview_path)
        logger.info("preview_saved", path=str(preview_path))

    if not validation.passed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
