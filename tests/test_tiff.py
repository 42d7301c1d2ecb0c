# tests/test_tiff.py
# ============================================================
# Unit Tests — Multi-page TIFF Utilities
# ============================================================

import pytest
from PIL import Image, ImageSequence

from orientation.classifier.verdicts import Verdict
from orientation.document.processor import DocumentProcessor
from orientation.document.tiff import (
    change_resolution,
    concatenate_tiff,
    get_page_count,
    split_tiff,
    write_corrected,
)
from orientation.errors import InvalidInput


@pytest.fixture
def multipage_tiff(tmp_path):
    frames = [Image.new("1", (100 + 10 * i, 80), color=1) for i in range(3)]
    path = tmp_path / "scan.tif"
    frames[0].save(path, format="TIFF", save_all=True, append_images=frames[1:], compression="group4")
    return path


def _frames(path):
    with Image.open(path) as image:
        return [frame.copy() for frame in ImageSequence.Iterator(image)]


class TestTiffUtilities:

    def test_get_page_count(self, multipage_tiff, tmp_path):
        single = tmp_path / "single.png"
        Image.new("L", (10, 10)).save(single)

        assert get_page_count(multipage_tiff) == 3
        assert get_page_count(single) == 1

    def test_split_tiff(self, multipage_tiff, tmp_path):
        paths = split_tiff(multipage_tiff, tmp_path / "pages")

        assert [p.name for p in paths] == ["scan_page1.tif", "scan_page2.tif", "scan_page3.tif"]
        assert [_frames(p)[0].width for p in paths] == [100, 110, 120]

    def test_concatenate_round_trips_split(self, multipage_tiff, tmp_path):
        paths = split_tiff(multipage_tiff, tmp_path / "pages")
        merged = concatenate_tiff(paths, tmp_path / "merged.tif")

        assert get_page_count(merged) == 3
        assert [f.width for f in _frames(merged)] == [100, 110, 120]

    def test_concatenate_mixed_modes(self, tmp_path):
        gray = tmp_path / "gray.png"
        bilevel = tmp_path / "bilevel.png"
        Image.new("L", (20, 20)).save(gray)
        Image.new("1", (30, 20)).save(bilevel)

        merged = concatenate_tiff([gray, bilevel], tmp_path / "mixed.tif")
        assert get_page_count(merged) == 2

    def test_concatenate_nothing_raises(self, tmp_path):
        with pytest.raises(InvalidInput):
            concatenate_tiff([], tmp_path / "empty.tif")

    def test_change_resolution(self, multipage_tiff, tmp_path):
        output = change_resolution(multipage_tiff, tmp_path / "300dpi.tif", 300)

        frames = _frames(output)
        assert len(frames) == 3
        assert tuple(round(v) for v in frames[0].info["dpi"]) == (300, 300)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(InvalidInput, match="not found"):
            split_tiff(tmp_path / "missing.tif", tmp_path)

    def test_write_corrected_rotates_upside_down_pages(self, tmp_path):
        page1 = Image.new("L", (10, 10), color=255)
        page2 = Image.new("L", (10, 10), color=255)
        page1.putpixel((0, 0), 0)
        page2.putpixel((0, 0), 0)
        pages = DocumentProcessor().load([page1, page2])

        output = write_corrected(pages, [Verdict.CORRECT, Verdict.UPSIDE_DOWN], tmp_path / "fixed.tif")

        first, second = _frames(output)
        assert first.getpixel((0, 0)) == 0
        assert second.getpixel((0, 0)) == 255
        assert second.getpixel((9, 9)) == 0

    def test_write_corrected_length_mismatch(self, tmp_path):
        pages = DocumentProcessor().load([Image.new("L", (10, 10))])
        with pytest.raises(InvalidInput):
            write_corrected(pages, [], tmp_path / "fixed.tif")
