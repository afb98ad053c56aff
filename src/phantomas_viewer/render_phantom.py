#!/usr/bin/env python3
"""
Phantomas Viewer - Orchestrator

Load a phantom description, build its 3D representations and export them.

Usage:
    phantomas-viewer phantom_save.json -o outputs/phantom.glb
    phantomas-viewer http://localhost:8000/phantom_save.json --representation both --show
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .common.config import Config
from .common.io import load_phantom
from .scene import PhantomScene, REPRESENTATIONS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Phantomas Viewer - Build 3D geometry for a fiber phantom"
    )
    parser.add_argument(
        "phantom",
        help="Phantom JSON file or http(s) URL"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output GLB path (default: <output_dir>/<phantom name>.glb)"
    )
    parser.add_argument(
        "--representation", "-r",
        choices=REPRESENTATIONS,
        default="tube",
        help="Fiber representation"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Config JSON file"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Colour seed (overrides config)"
    )
    parser.add_argument(
        "--constrained",
        action="store_true",
        help="Apply phantom-wide mesh segment constraints"
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Open the interactive viewer after export"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    # Build config
    try:
        config = Config.from_json(args.config) if args.config else Config()
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Failed to load config {args.config}: {e}")
        return 1
    if args.seed is not None:
        config.color_seed = args.seed
    if args.constrained:
        config.use_constraints = True

    try:
        phantom = load_phantom(args.phantom)
    except Exception as e:
        logger.error(f"Failed to load {args.phantom}: {e}")
        return 1

    if phantom.n_fibers == 0 and phantom.n_regions == 0:
        logger.error("Phantom has no fibers and no isotropic regions!")
        return 1

    try:
        phantom_scene = PhantomScene(phantom, config, args.representation)
    except ValueError as e:
        logger.error(f"Failed to build scene: {e}")
        return 1

    name = Path(args.phantom.rstrip("/")).stem or "phantom"
    output_path = args.output or config.output_dir / f"{name}.glb"
    summary = {
        "timestamp": datetime.now().isoformat(),
        "phantom": args.phantom,
        "output": str(output_path),
        **phantom_scene.summary()
    }
    summary_path = output_path.parent / "run_summary.json"
    try:
        phantom_scene.export(output_path)
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)
    except OSError as e:
        logger.error(f"Failed to write {output_path}: {e}")
        return 1

    logger.info(f"Summary saved to: {summary_path}")
    logger.info(f"COMPLETE: {phantom.n_fibers} fibers, {phantom.n_regions} regions "
                f"-> {output_path}")

    if args.show:
        phantom_scene.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
