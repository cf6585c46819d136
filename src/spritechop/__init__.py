from .cropper import SpriteBoundsError, crop, load_image, save_sprite
from .grid import GridRangeError, grid_sprites, iter_grid_sprites, load_description
from .models import Emit, Rect, ResolvedIdentity, SheetDescription, Skip, StyleRule
from .naming import sprite_filename
from .stylesheet import extract_positions, parse_line, parse_stylesheet

__version__ = "0.1.0"
