from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import Algorithm, GenerationConfig
from .dungeon.factory import DungeonFactory
from .exceptions import ConfigError
from .fov.fov import compute_visibility
from .logging_config import configure_logging, level_for_verbosity

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 2


def _fov_arg(value: str) -> Tuple[int, int, int]:
    parts = value.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("expected X,Y,RADIUS")
    try:
        x, y, r = (int(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not integers: {value!r}") from None
    if r < 0:
        raise argparse.ArgumentTypeError("radius must be >= 0")
    return x, y, r


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridcrawl",
        description="Generate a tile map and print it as ASCII",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="YAML generation config")
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in Algorithm],
        default=None,
        help="Generation algorithm (overrides the config file)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible map")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument(
        "--fov",
        type=_fov_arg,
        default=None,
        metavar="X,Y,R",
        help="Only show cells visible from (X, Y) within radius R",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    return parser


def build_config(args: argparse.Namespace) -> GenerationConfig:
    """Config file values first, then any command-line overrides."""
    config = GenerationConfig.from_yaml(args.config) if args.config else GenerationConfig()
    overrides = {
        name: getattr(args, name)
        for name in ("algorithm", "seed", "width", "height")
        if getattr(args, name) is not None
    }
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


def render(config: GenerationConfig, fov: Optional[Tuple[int, int, int]] = None) -> List[str]:
    grid = DungeonFactory.generate(config)
    if fov is None:
        return grid.to_ascii()
    x, y, radius = fov
    compute_visibility(grid, x, y, radius)
    return grid.to_ascii(show_spawn=False, only_visible=True)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level_for_verbosity(args.verbose))

    try:
        config = build_config(args)
        rows = render(config, args.fov)
    except (ConfigError, FileNotFoundError) as exc:
        logger.debug("Generation rejected", exc_info=True)
        print(f"gridcrawl: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    print("\n".join(rows))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
