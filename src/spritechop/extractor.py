#!/usr/bin/env python3

import argparse
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from .cropper import SpriteBoundsError, crop, load_image, save_sprite
from .grid import grid_sprites, load_description
from .models import Rect
from .naming import sprite_filename
from .stylesheet import identity_for_rule, parse_stylesheet

STYLESHEET_SUFFIXES = (".scss", ".css")


@dataclass
class SpriteMetadata:
    filename: str
    x: int
    y: int
    width: int
    height: int


@dataclass
class ChopResult:
    written: List[SpriteMetadata]
    skipped: List[str]
    mode: str


class SpriteChopper:
    def __init__(self, console: Console, output_dir: str = "images", log_file: Optional[str] = None):
        self.console = console
        self.output_dir = Path(output_dir)
        self.logger = self._setup_logger(log_file)

    @staticmethod
    def _setup_logger(log_file: Optional[str]) -> logging.Logger:
        logger = logging.getLogger('SpriteChop')
        logger.setLevel(logging.DEBUG)

        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

        # File handler
        if log_file:
            fh = logging.FileHandler(log_file)
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(formatter)
            logger.addHandler(fh)

        # Console handler, bounds skips are warnings
        ch = logging.StreamHandler()
        ch.setLevel(logging.WARNING)
        ch.setFormatter(formatter)
        logger.addHandler(ch)

        return logger

    def create_output_directory(self) -> Path:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create directory {self.output_dir}: {e}")
            raise
        self.console.log(f"[green]Output directory ready: {self.output_dir}")
        return self.output_dir

    def load_sheet(self, path) -> np.ndarray:
        image = load_image(path)
        self.console.log(f"[green]Loaded image: {path}")
        self.console.log(f"Shape: {image.shape}, Channels: {image.shape[2] if len(image.shape) > 2 else 1}")
        return image

    def chop(self, path: str, sheet_name: str = "pokesprite.png", legacy_axes: bool = True) -> ChopResult:
        """Dispatch on the input file extension."""
        if Path(path).suffix.lower() in STYLESHEET_SUFFIXES:
            return self.chop_stylesheet(path, sheet_name=sheet_name)
        return self.chop_grid(path, legacy_axes=legacy_axes)

    def chop_grid(self, description_path: str, legacy_axes: bool = True) -> ChopResult:
        description = load_description(description_path)
        self.logger.debug(
            f"Grid sheet {description.source_image_path}: {description.columns}x{description.rows}, "
            f"outline {description.outline_size}px, padding {description.padding}px, "
            f"{len(description.entries)} entries"
        )
        image = self.load_sheet(description.source_image_path)
        height, width = image.shape[:2]

        sprites = grid_sprites(description, width, height, legacy_axes=legacy_axes)
        return self._write_sprites(image, sprites, "grid", total=len(sprites))

    def chop_stylesheet(self, stylesheet_path: str, sheet_name: str = "pokesprite.png") -> ChopResult:
        stylesheet = Path(stylesheet_path)
        text = stylesheet.read_text(encoding="utf-8", errors="replace")
        image = self.load_sheet(stylesheet.parent / sheet_name)

        rules = parse_stylesheet(text)
        self.logger.debug(f"Parsed {len(rules)} rules from {stylesheet_path}")

        sprites = ((sprite_filename(identity_for_rule(rule)), rule.source_rect) for rule in rules)
        return self._write_sprites(image, sprites, "stylesheet", total=len(rules))

    def _write_sprites(
        self,
        image: np.ndarray,
        sprites: Iterable[Tuple[str, Rect]],
        mode: str,
        total: int
    ) -> ChopResult:
        result = ChopResult(written=[], skipped=[], mode=mode)

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            TimeElapsedColumn(),
            console=self.console
        ) as progress:
            task = progress.add_task(f"Chopping sprites ({mode} mode)...", total=total)

            for filename, rect in sprites:
                try:
                    sprite = crop(image, rect)
                except SpriteBoundsError as e:
                    self.logger.warning(f"skip {filename} ({e})")
                    result.skipped.append(filename)
                    progress.update(task, advance=1)
                    continue

                save_sprite(sprite, self.output_dir / filename)
                self.logger.debug(f"Wrote {filename} from {rect}")
                result.written.append(SpriteMetadata(
                    filename=filename,
                    x=rect.x,
                    y=rect.y,
                    width=rect.width,
                    height=rect.height
                ))
                progress.update(task, advance=1)

        return result

    def save_metadata(self, result: ChopResult, source: str) -> Path:
        """Save sprite metadata to JSON file"""
        metadata_file = self.output_dir / "sprites_metadata.json"
        metadata_dict = {
            "source": source,
            "extraction_mode": result.mode,
            "total_sprites": len(result.written),
            "skipped": result.skipped,
            "sprites": [asdict(sprite) for sprite in result.written],
        }

        with open(metadata_file, 'w') as f:
            json.dump(metadata_dict, f, indent=2)

        self.console.log(f"[green]Saved metadata to {metadata_file}")
        return metadata_file

    def print_summary(self, result: ChopResult):
        table = Table(title="Sprite Chop Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Mode", result.mode)
        table.add_row("Sprites written", str(len(result.written)))
        table.add_row("Skipped (out of bounds)", str(len(result.skipped)))

        if result.written:
            written = result.written
            table.add_row("Average width", f"{sum(s.width for s in written) / len(written):.1f}px")
            table.add_row("Average height", f"{sum(s.height for s in written) / len(written):.1f}px")

        self.console.print(table)


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Chop a spritesheet into individual sprites from a JSON grid description "
                    "or a pokesprite stylesheet.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "input",
        type=str,
        help="Grid description (.json) or stylesheet (.scss/.css)."
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="images",
        help="Directory to write the sprites into."
    )
    parser.add_argument(
        "--sheet-name",
        type=str,
        default="pokesprite.png",
        help="Spritesheet filename next to the stylesheet (stylesheet mode only)."
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default="sprite_chop.log",
        help="Debug log file. Pass an empty string to disable."
    )
    parser.add_argument(
        "--metadata",
        action="store_true",
        help="Write sprites_metadata.json describing every written sprite."
    )
    parser.add_argument(
        "--fix-axes",
        action="store_true",
        help="Grid mode: offset columns by cell width and rows by cell height "
             "instead of the legacy swapped axes."
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    console = Console()
    args = parse_arguments(argv)

    try:
        chopper = SpriteChopper(console, output_dir=args.output_dir, log_file=args.log_file or None)
        chopper.create_output_directory()

        console.print("[blue]Starting sprite chop...")
        result = chopper.chop(args.input, sheet_name=args.sheet_name, legacy_axes=not args.fix_axes)

        if args.metadata:
            chopper.save_metadata(result, args.input)

        chopper.print_summary(result)
        console.print(f"[green]Successfully chopped {len(result.written)} sprites!")

    except Exception as e:
        console.print(f"[red]Error during sprite chop: {str(e)}")
        logging.getLogger('SpriteChop').exception("Unhandled exception during sprite chop")
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
