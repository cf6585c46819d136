import json
from pathlib import Path
from typing import Iterator, List, Tuple, Union

from .models import Emit, Rect, SheetDescription, Skip
from .naming import grid_identity, sprite_filename


class GridRangeError(IndexError):
    """An entry points past the last cell of the grid."""


def load_description(path: Union[str, Path]) -> SheetDescription:
    description_path = Path(path)
    if not description_path.exists():
        raise FileNotFoundError(f"Sheet description not found: {path}")

    with open(description_path) as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed sheet description {path}: {e}") from e

    try:
        return SheetDescription.from_dict(raw)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed sheet description {path}: missing or invalid field {e}") from e


def cell_size(description: SheetDescription, image_width: int, image_height: int) -> Tuple[int, int]:
    """Return (cell_width, cell_height) for a sheet of the given size.

    Sheets are expected to divide evenly; any remainder is truncated.
    """
    outline = description.outline_size
    cell_height = (image_height - (description.rows + 1) * outline) // description.rows
    cell_width = (image_width - (description.columns + 1) * outline) // description.columns

    if cell_width <= 0 or cell_height <= 0:
        raise ValueError(
            f"{image_width}x{image_height} sheet is too small for "
            f"{description.columns}x{description.rows} cells with {outline}px outline"
        )
    if cell_width - 2 * description.padding <= 0 or cell_height - 2 * description.padding <= 0:
        raise ValueError(
            f"{description.padding}px padding leaves nothing of a {cell_width}x{cell_height} cell"
        )
    return cell_width, cell_height


def slot_rect(
    index: int,
    description: SheetDescription,
    cell_width: int,
    cell_height: int,
    legacy_axes: bool = True
) -> Rect:
    """Source rectangle of the sprite in grid slot ``index`` (row-major).

    With ``legacy_axes`` the column offset is scaled by the cell height and the
    row offset by the cell width, which is how existing assets were cut. On
    sheets with square cells both formulas agree.
    """
    if not 0 <= index < description.slot_count:
        raise GridRangeError(
            f"Grid slot {index} out of range for {description.columns}x{description.rows} sheet"
        )

    row = index // description.columns
    column = index % description.columns
    outline = description.outline_size
    padding = description.padding

    if legacy_axes:
        x_step, y_step = cell_height, cell_width
    else:
        x_step, y_step = cell_width, cell_height

    return Rect(
        x=column * x_step + (column + 1) * outline + padding,
        y=row * y_step + (row + 1) * outline + padding,
        width=cell_width - 2 * padding,
        height=cell_height - 2 * padding,
    )


def iter_grid_sprites(
    description: SheetDescription,
    image_width: int,
    image_height: int,
    legacy_axes: bool = True
) -> Iterator[Tuple[str, Rect]]:
    """Yield (filename, source rectangle) for every emitted entry, in order."""
    cell_width, cell_height = cell_size(description, image_width, image_height)

    cursor = 0
    for entry in description.entries:
        if isinstance(entry, Skip):
            cursor += entry.count
            continue
        if not isinstance(entry, Emit):
            raise TypeError(f"Unexpected sheet entry: {entry!r}")

        rect = slot_rect(cursor, description, cell_width, cell_height, legacy_axes)
        yield sprite_filename(grid_identity(entry, description.suffix)), rect
        cursor += 1


def grid_sprites(
    description: SheetDescription,
    image_width: int,
    image_height: int,
    legacy_axes: bool = True
) -> List[Tuple[str, Rect]]:
    """Resolve every sprite up front so a bad layout fails before anything is written."""
    return list(iter_grid_sprites(description, image_width, image_height, legacy_axes))
