#!/usr/bin/env python3
"""Generate the TypeScript sprite position table from a pokesprite stylesheet."""

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List

from rich.console import Console

from .stylesheet import SpritePosition, extract_positions

DEFAULT_INPUT = "./output/pokesprite.scss"
DEFAULT_OUTPUT = "./output/sprite-positions.ts"

logger = logging.getLogger("SpriteChop")


def render_typescript(positions: Dict[str, SpritePosition], order: List[str]) -> str:
    lines = [
        "// Auto-generated from pokesprite.scss",
        "// Do not edit manually",
        "",
        "import { SpritePosition } from './sprite-utils';",
        "",
        "/**",
        " * Map of sprite position data from the spritesheet",
        " */",
        "export const spritePositions: Record<string, SpritePosition> = {",
    ]
    for key in order:
        p = positions[key]
        lines.append(
            f"  {json.dumps(key)}: {{ width: {p.width}, height: {p.height}, "
            f"backgroundPosition: {json.dumps(p.background_position)} }},"
        )
    lines.append("};")
    return "\n".join(lines) + "\n"


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a TypeScript sprite position table from a pokesprite stylesheet.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help=f"Input stylesheet and output file (defaults: {DEFAULT_INPUT} {DEFAULT_OUTPUT})."
    )
    args = parser.parse_args(argv)
    if len(args.paths) not in (0, 2):
        parser.error("expected either no paths or <input.scss> <output.ts>")

    args.input, args.output = args.paths or (DEFAULT_INPUT, DEFAULT_OUTPUT)
    return args


def main(argv=None) -> int:
    console = Console(stderr=True)
    args = parse_arguments(argv)

    try:
        console.log(f"Reading {args.input}")
        text = Path(args.input).read_text(encoding="utf-8", errors="replace")

        positions, order = extract_positions(text)
        console.log(f"Found {len(positions)} sprite positions")

        Path(args.output).write_text(render_typescript(positions, order))
        console.print(f"[green]Successfully generated {args.output}")
    except Exception as e:
        console.print(f"[red]Error generating sprite positions: {str(e)}")
        logger.exception("Unhandled exception during position table generation")
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
