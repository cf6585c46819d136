import io
import json
import logging

import cv2
import numpy as np
import pytest
from rich.console import Console

from spritechop import extractor, positions
from spritechop.cropper import SpriteBoundsError, crop, load_image, save_sprite
from spritechop.models import Rect

from .sheets import make_grid_sheet, random_sheet

RULES = """\
.pkicon.pkicon-010 { width: 20px; height: 20px; background-position: -5px -5px; }
.pkicon.pkicon-011 { width: 4px; height: 3px; background-position: -2px -1px; }
.pkicon.pkicon-ball-love { width: 5px; height: 5px; background-position: 0px 0px; }
"""


@pytest.fixture
def stylesheet(tmp_path):
    sheet = random_sheet(20, 20)
    cv2.imwrite(str(tmp_path / "pokesprite.png"), sheet)
    path = tmp_path / "pokesprite.scss"
    path.write_text(RULES)
    return str(path), sheet


class TestCropper:
    def test_crop_copies_pixels(self):
        image = np.arange(5 * 6 * 3, dtype=np.uint8).reshape(5, 6, 3)
        sprite = crop(image, Rect(1, 2, 3, 2))
        assert np.array_equal(sprite, image[2:4, 1:4])
        sprite[0, 0] = 0
        assert image[2, 1, 0] != 0

    @pytest.mark.parametrize("rect", [
        Rect(-1, 0, 2, 2),
        Rect(0, -1, 2, 2),
        Rect(5, 0, 2, 2),
        Rect(0, 4, 2, 2),
        Rect(0, 0, 0, 2),
    ])
    def test_out_of_bounds(self, rect):
        with pytest.raises(SpriteBoundsError):
            crop(np.zeros((5, 6, 3), dtype=np.uint8), rect)

    def test_load_missing_image(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "missing.png")

    def test_load_undecodable_image(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not a png")
        with pytest.raises(ValueError):
            load_image(path)

    def test_save_into_missing_directory(self, tmp_path):
        with pytest.raises(IOError):
            save_sprite(np.zeros((2, 2, 4), dtype=np.uint8), tmp_path / "missing" / "001.png")


class TestChopStylesheet:
    def test_bounds_skip_continues(self, tmp_path, chopper, stylesheet, caplog):
        path, sheet = stylesheet

        result = chopper.chop_stylesheet(path)

        assert result.skipped == ["010.png"]
        assert [s.filename for s in result.written] == ["011.png", "love-ball.png"]
        assert not (tmp_path / "images" / "010.png").exists()
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "010.png" in warnings[0].getMessage()

        sprite = cv2.imread(str(tmp_path / "images" / "011.png"), cv2.IMREAD_UNCHANGED)
        assert np.array_equal(sprite, sheet[1:4, 2:6])

    def test_dispatch_on_extension(self, chopper, stylesheet):
        path, _ = stylesheet
        assert chopper.chop(path).mode == "stylesheet"

    def test_css_extension_is_stylesheet(self, tmp_path, chopper, stylesheet):
        path, _ = stylesheet
        css = tmp_path / "pokesprite.css"
        css.write_text(RULES)
        result = chopper.chop(str(css))
        assert result.mode == "stylesheet"
        assert (tmp_path / "images" / "love-ball.png").exists()

    def test_undecodable_bytes_are_ignored(self, tmp_path, chopper, stylesheet):
        path, _ = stylesheet
        with open(path, "wb") as f:
            f.write(b"/* \xa9 2020 pokesprite \xff */\n")
            f.write(b".pkicon.pkicon-001 { width: 4px; height: 4px; background-position: 0px 0px; }\n")

        result = chopper.chop_stylesheet(path)

        assert [s.filename for s in result.written] == ["001.png"]

    def test_unwritable_output_is_fatal(self, tmp_path, stylesheet):
        path, _ = stylesheet
        chopper = extractor.SpriteChopper(Console(file=io.StringIO()),
                                          output_dir=str(tmp_path / "missing"))
        with pytest.raises(IOError):
            chopper.chop_stylesheet(path)

    def test_missing_sheet_is_fatal(self, tmp_path, chopper):
        path = tmp_path / "pokesprite.scss"
        path.write_text(RULES)
        with pytest.raises(FileNotFoundError):
            chopper.chop_stylesheet(str(path))


class TestMain:
    def test_usage_without_arguments(self, capsys):
        with pytest.raises(SystemExit) as exc:
            extractor.main([])
        assert exc.value.code != 0
        assert "usage" in capsys.readouterr().err

    def test_too_many_arguments(self, capsys):
        with pytest.raises(SystemExit) as exc:
            extractor.main(["a.json", "b.json"])
        assert exc.value.code != 0

    def test_missing_input_fails(self, tmp_path):
        code = extractor.main([str(tmp_path / "nope.json"), "--output-dir", str(tmp_path / "out"), "--log-file", ""])
        assert code == 1

    def test_grid_run_with_metadata(self, tmp_path, write_description):
        sheet = make_grid_sheet(2, 1, cell=3, outline=0)
        path = write_description(sheet, columns=2, rows=1, pokemon=[{"id": 4}, {"id": 5, "form": "mega"}])
        out = tmp_path / "out"

        code = extractor.main([path, "--output-dir", str(out), "--log-file", "", "--metadata"])

        assert code == 0
        assert (out / "004.png").exists()
        assert (out / "005-mega.png").exists()
        metadata = json.loads((out / "sprites_metadata.json").read_text())
        assert metadata["extraction_mode"] == "grid"
        assert metadata["total_sprites"] == 2
        assert metadata["sprites"][1] == {"filename": "005-mega.png", "x": 3, "y": 0, "width": 3, "height": 3}

    def test_stylesheet_run_writes_log_file(self, tmp_path, stylesheet):
        path, _ = stylesheet
        log_file = tmp_path / "chop.log"

        code = extractor.main([path, "--output-dir", str(tmp_path / "out"), "--log-file", str(log_file)])

        assert code == 0
        assert "skip 010.png" in log_file.read_text()

    def test_unwritable_output_dir_fails(self, tmp_path, stylesheet):
        path, _ = stylesheet
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        code = extractor.main([path, "--output-dir", str(blocker / "out"), "--log-file", ""])

        assert code == 1

    def test_non_utf8_stylesheet_run(self, tmp_path, stylesheet):
        path, _ = stylesheet
        with open(path, "wb") as f:
            f.write(b"/* \xa9 2020 */\n")
            f.write(b".pkicon.pkicon-001 { width: 4px; height: 4px; background-position: 0px 0px; }\n")
        out = tmp_path / "out"

        code = extractor.main([path, "--output-dir", str(out), "--log-file", ""])

        assert code == 0
        assert (out / "001.png").exists()


class TestPositionsMain:
    def test_writes_typescript(self, tmp_path):
        source = tmp_path / "pokesprite.scss"
        source.write_text(
            ".pkicon.pkicon-025.form-cap { width: 21px; height: 20px; background-position: -67px -56px; }\n"
            ".pkicon.pkicon-ball-love { width: 18px; height: 18px; background-position: 0px 0px; }\n"
        )
        target = tmp_path / "sprite-positions.ts"

        assert positions.main([str(source), str(target)]) == 0

        text = target.read_text()
        assert text.startswith("// Auto-generated from pokesprite.scss\n")
        assert '  "pokemon-25-cap": { width: 21, height: 20, backgroundPosition: "-67px -56px" },\n' in text
        assert "ball" not in text.split("= {")[1]
        assert text.endswith("};\n")

    def test_single_path_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            positions.main(["only.scss"])
        assert exc.value.code != 0

    def test_missing_input(self, tmp_path):
        assert positions.main([str(tmp_path / "none.scss"), str(tmp_path / "out.ts")]) == 1

    def test_non_utf8_input(self, tmp_path):
        source = tmp_path / "pokesprite.scss"
        source.write_bytes(
            b"// \xa9 pokesprite\n"
            b".pkicon.pkicon-007 { width: 8px; height: 8px; background-position: -8px 0px; }\n"
        )
        target = tmp_path / "sprite-positions.ts"

        assert positions.main([str(source), str(target)]) == 0
        assert '"pokemon-7"' in target.read_text()
