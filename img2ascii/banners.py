"""Rendering of text banners as ASCII art."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from img2ascii.converter import run_banner

FONT_ROOT = Path("source") / "banners" / "fonts"

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 10
CELL_SIZE = 16
MARGIN = 5
FONT_SCALE = 0.8


class BannerError(Exception):
    """Raised when a banner cannot be produced."""


def font_path(font: str) -> Path:
    """Path of the TrueType file for a named font."""
    return FONT_ROOT / f"{font}.ttf"


@dataclass
class BannerOptions:
    font: str = ""
    reverse: bool = False
    characters: str = ""
    style: str = ""


@dataclass
class Banner:
    """A message to render; ``path`` is the stem of every file produced."""

    message: str
    path: str
    width: int = 0
    height: int = 0
    options: BannerOptions = field(default_factory=BannerOptions)

    def render_to_image(self) -> str:
        """Draw the message centred on a white canvas and save it as PNG.

        Missing sizes fall back to the defaults. Returns the PNG path.
        """
        if self.width <= 0:
            self.width = DEFAULT_WIDTH
        if self.height <= 0:
            self.height = DEFAULT_HEIGHT
        img_width = MARGIN + self.width * CELL_SIZE
        img_height = MARGIN + self.height * CELL_SIZE
        canvas = Image.new("RGBA", (img_width, img_height), (255, 255, 255, 255))
        font_size = max(1, round(img_height * FONT_SCALE))
        try:
            font = ImageFont.truetype(str(font_path(self.options.font)), font_size)
        except OSError as exc:
            raise BannerError(f"failed to load font: {exc}") from exc
        ImageDraw.Draw(canvas).text(
            (img_width / 2, img_height / 2),
            self.message,
            fill=(0, 0, 0, 255),
            font=font,
            anchor="mm",
        )
        png_path = f"{self.path}.png"
        canvas.save(png_path, format="PNG")
        return png_path

    def resize(self, png_path: str) -> Image.Image:
        """Load a PNG and scale it to the banner's width and height."""
        try:
            with Image.open(png_path) as img:
                source = img.convert("RGBA")
        except OSError as exc:
            raise BannerError(f"failed to load image: {exc}") from exc
        return source.resize((self.width, self.height), Image.Resampling.BILINEAR)


def render_banner(banner: Banner) -> str:
    """Render a banner through to ASCII art and return the text file's path."""
    work = dataclasses.replace(banner)
    try:
        png_path = work.render_to_image()
    except (BannerError, OSError) as exc:
        raise BannerError(f"failed to render banner: {exc}") from exc
    try:
        resized = work.resize(png_path)
    except (BannerError, ValueError) as exc:
        raise BannerError(f"failed to resize banner image: {exc}") from exc
    resized_path = f"{png_path}.resized.png"
    try:
        resized.save(resized_path, format="PNG")
    except OSError as exc:
        raise BannerError(f"failed to save resized image: {exc}") from exc
    ascii_path = f"{work.path}.txt"
    try:
        run_banner(resized_path, ascii_path, work.width, work.height)
    except OSError as exc:
        raise BannerError(f"failed to convert image to ASCII: {exc}") from exc
    return ascii_path