import pytest
from PIL import Image

from img2ascii.converter import (
    AsciiImage,
    ConversionMode,
    Resolution,
    calculate_luminance,
    fit_size,
    load_image,
    make_ascii,
    reverse_string,
    run,
    run_banner,
)


@pytest.mark.parametrize(
    "r,g,b,expected",
    [
        (0, 0, 0, 0),
        (255, 255, 255, 255),
        (255, 0, 0, 54),
        (0, 255, 0, 182),
        (0, 0, 255, 18),
        (128, 128, 128, 128),
    ],
)
def test_calculate_luminance(r, g, b, expected):
    assert calculate_luminance(r, g, b) == expected


@pytest.mark.parametrize(
    "mode,reverse,luminance,expected",
    [
        (ConversionMode.DEFAULT, False, 0, "@"),
        (ConversionMode.DEFAULT, False, 255, "."),
        (ConversionMode.DEFAULT, True, 0, "."),
        (ConversionMode.DEFAULT, True, 255, "@"),
        (ConversionMode.BANNER, False, 0, "@"),
        (ConversionMode.BANNER, False, 255, " "),
    ],
)
def test_make_ascii(mode, reverse, luminance, expected):
    assert make_ascii(mode, reverse, luminance) == expected


@pytest.mark.parametrize(
    "text,expected",
    [("", ""), ("a", "a"), ("abc", "cba"), ("@#%*", "*%#@"), ("αβγ", "γβα")],
)
def test_reverse_string(text, expected):
    assert reverse_string(text) == expected


@pytest.mark.parametrize(
    "width,height,expected",
    [(1, 1, 1), (10, 10, 100), (65, 54, 3510), (0, 0, 0)],
)
def test_pixel_count(width, height, expected):
    assert Resolution(width, height).pixel_count() == expected


def _solid(width, height, rgba):
    return bytes(rgba) * (width * height)


def test_luminance_scores_gray():
    img = AsciiImage("test", Resolution(2, 2), _solid(2, 2, (128, 128, 128, 255)))
    scores = img.luminance_scores()
    assert len(scores) == 4
    assert scores == [calculate_luminance(128, 128, 128)] * 4


def test_luminance_scores_pads_missing_pixels():
    img = AsciiImage("short", Resolution(2, 2), _solid(1, 1, (255, 255, 255, 255)))
    assert img.luminance_scores() == [255, 0, 0, 0]


def test_to_ascii_black_has_one_newline_per_row():
    img = AsciiImage("test", Resolution(2, 2), _solid(2, 2, (0, 0, 0, 255)))
    art = img.to_ascii(ConversionMode.DEFAULT, False)
    assert art.count("\n") == 2
    assert art == "@@\n@@\n"


def test_fit_size_square_into_page():
    assert fit_size(100, 100, 65, 54) == (54, 54)


def test_fit_size_wide_image():
    assert fit_size(200, 100, 65, 54) == (65, 32)


def test_load_image_premultiplies_transparent_pixels(tmp_path):
    path = tmp_path / "clear.png"
    Image.new("RGBA", (3, 2), (255, 255, 255, 0)).save(path)
    img = load_image(path, 0, 0)
    assert img.res == Resolution(3, 2)
    assert img.data == bytes(3 * 2 * 4)


def test_load_image_resizes(tmp_path):
    path = tmp_path / "white.png"
    Image.new("RGB", (8, 8), (255, 255, 255)).save(path)
    img = load_image(path, 4, 2)
    assert img.res == Resolution(4, 2)
    assert len(img.data) == 4 * 2 * 4
    assert img.luminance_scores() == [255] * 8


def test_run_with_invalid_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        run(False, tmp_path / "nonexistent.jpg", tmp_path / "output.txt")


def test_run_banner_with_invalid_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        run_banner(tmp_path / "nonexistent.jpg", tmp_path / "output.txt", 50, 15)


def test_run_rejects_non_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not an image")
    with pytest.raises(OSError):
        run(False, path, tmp_path / "output.txt")


def test_run_black_image_reversed(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "black.png"
    Image.new("RGB", (10, 10), (0, 0, 0)).save(src)
    out = tmp_path / "out.txt"
    art = run(True, src, out)
    expected = ("." * 54 + "\n") * 54
    assert art == expected
    assert out.read_text() == expected
    assert (tmp_path / "img2ascii.log").read_text() == expected


def test_run_banner_white_image(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "white.png"
    Image.new("RGB", (40, 10), (255, 255, 255)).save(src)
    out = tmp_path / "banner.txt"
    art = run_banner(src, out, 50, 15)
    expected = (" " * 50 + "\n") * 12
    assert art == expected
    assert out.read_text() == expected