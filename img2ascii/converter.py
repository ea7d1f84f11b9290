"""Conversion of raster images into ASCII art."""

from __future__ import annotations

import contextlib
import enum
import itertools
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_ASCII_CHARS = "@#%*o()1l=:-."
BANNER_ASCII_CHARS = "@#*+=-:. "

PAGE_WIDTH = 65
PAGE_HEIGHT = 54

LOG_FILE = "img2ascii.log"


class ConversionMode(enum.Enum):
    """Which character ramp a conversion uses."""

    DEFAULT = 0
    BANNER = 1

    @property
    def charset(self) -> str:
        return BANNER_ASCII_CHARS if self is ConversionMode.BANNER else DEFAULT_ASCII_CHARS


@dataclass(frozen=True)
class Resolution:
    """Width and height of an image in pixels."""

    width: int
    height: int

    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass
class AsciiImage:
    """An image held as premultiplied RGBA bytes, ready for conversion."""

    name: str
    res: Resolution
    data: bytes

    def luminance_scores(self) -> list[int]:
        """Return one luminance value per pixel, row by row.

        Pixels missing from ``data`` score 0.
        """
        count = self.res.pixel_count()
        data = self.data
        pixels = zip(data[0::4], data[1::4], data[2::4], data[3::4])
        scores = [calculate_luminance(r, g, b) for r, g, b, _ in itertools.islice(pixels, count)]
        scores.extend([0] * (count - len(scores)))
        return scores

    def to_ascii(self, mode: ConversionMode, reverse: bool) -> str:
        """Render the image as lines of characters, each ending in a newline."""
        scores = self.luminance_scores()
        width = self.res.width
        lines = []
        for row in range(self.res.height):
            chunk = scores[row * width:(row + 1) * width]
            lines.append("".join(make_ascii(mode, reverse, score) for score in chunk))
            lines.append("\n")
        return "".join(lines)


def calculate_luminance(r: int, g: int, b: int) -> int:
    """Relative luminance (Rec. 709 weights), rounded half away from zero."""
    value = 0.2126 * r + 0.7152 * g + 0.0722 * b
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def reverse_string(s: str) -> str:
    return s[::-1]


def make_ascii(mode: ConversionMode, reverse: bool, luminance: int) -> str:
    """Map a luminance in 0..255 to one character of the mode's ramp."""
    ramp = mode.charset
    if reverse:
        ramp = reverse_string(ramp)
    idx = min(luminance * (len(ramp) - 1) // 255, len(ramp) - 1)
    return ramp[idx]


def fit_size(orig_width: int, orig_height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Fit an image into a box, keeping its aspect ratio."""
    img_aspect = orig_width / orig_height
    page_aspect = max_width / max_height
    if img_aspect > page_aspect:
        return max_width, min(int(max_width / img_aspect), max_height)
    return min(int(max_height * img_aspect), max_width), max_height


def load_image(img_path: PathLike, target_width: int, target_height: int) -> AsciiImage:
    """Decode an image file, scaling it when both target sizes are positive."""
    with Image.open(img_path) as img:
        pixels = img.convert("RGBA").convert("RGBa")
    width, height = pixels.size
    if target_width > 0 and target_height > 0:
        pixels = pixels.resize((target_width, target_height), Image.Resampling.BILINEAR)
        width, height = target_width, target_height
    return AsciiImage(name=str(img_path), res=Resolution(width, height), data=pixels.tobytes())


def _image_size(img_path: PathLike) -> tuple[int, int]:
    with Image.open(img_path) as img:
        img.load()
        return img.size


def _write_output(output_path: PathLike, text: str, permissions: int) -> None:
    fd = os.open(output_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, permissions)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(text)
    with contextlib.suppress(OSError):
        Path(LOG_FILE).write_text(text, encoding="utf-8")


def _convert(
    img_path: PathLike,
    output_path: PathLike,
    max_width: int,
    max_height: int,
    mode: ConversionMode,
    reverse: bool,
    permissions: int,
) -> str:
    width, height = _image_size(img_path)
    target_width, target_height = fit_size(width, height, max_width, max_height)
    art = load_image(img_path, target_width, target_height).to_ascii(mode, reverse)
    _write_output(output_path, art, permissions)
    return art


def run(reverse: bool, img_path: PathLike, output_path: PathLike) -> str:
    """Convert an image to page-sized ASCII art, write it out and return it."""
    return _convert(
        img_path, output_path, PAGE_WIDTH, PAGE_HEIGHT, ConversionMode.DEFAULT, reverse, 0o700
    )


def run_banner(img_path: PathLike, output_path: PathLike, width: int, height: int) -> str:
    """Convert a rendered banner image to ASCII art, write it out and return it."""
    return _convert(img_path, output_path, width, height, ConversionMode.BANNER, False, 0o644)