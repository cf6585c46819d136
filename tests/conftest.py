import io
import json

import cv2
import pytest
from rich.console import Console

from spritechop.extractor import SpriteChopper


@pytest.fixture
def chopper(tmp_path):
    c = SpriteChopper(Console(file=io.StringIO()), output_dir=str(tmp_path / "images"))
    c.create_output_directory()
    return c


@pytest.fixture
def write_description(tmp_path):
    def _write(sheet, **fields):
        sheet_path = tmp_path / "sheet.png"
        cv2.imwrite(str(sheet_path), sheet)
        raw = {
            "filename": str(sheet_path),
            "outline_px_size": 0,
            "padding_px_size": 0,
            "suffix": None,
        }
        raw.update(fields)
        description_path = tmp_path / "sheet.json"
        description_path.write_text(json.dumps(raw))
        return str(description_path)
    return _write
