"""HTTP handlers for image uploads, banners and the home page."""

from __future__ import annotations

import html
import logging
import os
import re
import tempfile
import uuid
from dataclasses import dataclass
from typing import Optional

from flask import Flask, Response, render_template_string, request

from img2ascii.banners import Banner, BannerError, BannerOptions, render_banner
from img2ascii.converter import run

log = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_SIZE = 2 << 20
DEFAULT_MAX_BANNER_LEN = 64

ALLOWED_CONTENT_TYPES = frozenset({"image/png", "image/jpeg", "image/gif"})
IMAGE_SIGNATURES = (b"\x89PNG", b"\xff\xd8\xff", b"GIF87a", b"GIF89a")
SNIFF_LENGTH = 512

BANNER_FONT = "Notable-Regular"
BANNER_WIDTH = 50
BANNER_HEIGHT = 15

_ALLOWED_BANNER_TEXT = re.compile(r"[a-zA-Z0-9 \t\n\f\r.,!?\-_]+")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")
_MAX_FILENAME_LEN = 255


@dataclass
class Config:
    """Settings the request handlers need."""

    output_dir: str = ""
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    max_banner_len: int = DEFAULT_MAX_BANNER_LEN
    template: Optional[str] = None


def allowed_file_type(content_type: str, data: bytes) -> bool:
    """Accept only PNG, JPEG or GIF uploads whose declared type and content agree."""
    if content_type not in ALLOWED_CONTENT_TYPES:
        return False
    head = data[:SNIFF_LENGTH]
    if len(head) < 4:
        return False
    return head.startswith(IMAGE_SIGNATURES)


def sanitize_banner_text(text: str) -> str:
    """Trim and validate banner text, returning it HTML-escaped.

    Raises ValueError when the text is empty or holds disallowed characters.
    """
    cleaned = text.strip()
    if not cleaned:
        raise ValueError("banner text cannot be empty")
    if not _ALLOWED_BANNER_TEXT.fullmatch(cleaned):
        raise ValueError("banner text contains invalid characters")
    return html.escape(cleaned)


def _random_upload_name() -> str:
    return f"upload_{uuid.uuid4().hex[:8]}"


def _base_name(path: str) -> str:
    trimmed = path.rstrip("/")
    if not trimmed:
        return "/" if path else "."
    return trimmed.rsplit("/", 1)[-1]


def sanitize_filename(filename: str) -> str:
    """Reduce an uploaded file name to a safe base name."""
    if not filename.strip():
        return _random_upload_name()
    base = _base_name(filename)
    if base in (".", ".."):
        return _random_upload_name()
    safe = _UNSAFE_FILENAME_CHARS.sub("_", base)
    if not safe or len(safe) > _MAX_FILENAME_LEN:
        return _random_upload_name()
    return safe


def _text(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def _remove(path: str, what: str) -> None:
    try:
        os.remove(path)
    except OSError as exc:
        log.warning("Failed to remove %s: %s", what, exc)


def create_app(config: Config) -> Flask:
    """Build the web application serving the home page, uploads and banners."""
    app = Flask(__name__, static_folder=None)

    @app.get("/")
    def home() -> Response:
        if config.template is None:
            return _text("Template execution error: no template configured", 500)
        try:
            page = render_template_string(config.template)
        except Exception as exc:  # any template failure becomes a 500
            return _text(f"Template execution error: {exc}", 500)
        return Response(page, mimetype="text/html")

    @app.post("/upload")
    def upload() -> Response:
        upload_file = request.files.get("file")
        if upload_file is None:
            log.warning("File upload error: no file field in request")
            return _text("File upload failed", 400)

        data = upload_file.stream.read(config.max_upload_size + 1)
        if len(data) > config.max_upload_size:
            log.warning(
                "File too large: %d bytes (max: %d)", len(data), config.max_upload_size
            )
            return _text("File too large", 400)

        content_type = upload_file.headers.get("Content-Type", "")
        if not allowed_file_type(content_type, data):
            log.warning("Unsupported file type: %s", content_type)
            return _text("Unsupported file type", 400)

        safe_name = sanitize_filename(upload_file.filename or "")
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f"img2ascii_{safe_name}_", suffix=".tmp")
        except OSError as exc:
            log.error("Failed to create temp file: %s", exc)
            return _text("Internal server error", 500)

        try:
            try:
                with os.fdopen(fd, "wb") as tmp:
                    tmp.write(data)
                    tmp.flush()
                    os.fsync(tmp.fileno())
            except OSError as exc:
                log.error("Failed to save uploaded file: %s", exc)
                return _text("Internal server error", 500)

            output_path = os.path.join(config.output_dir, f"output-{uuid.uuid4()}.txt")
            try:
                run(True, tmp_path, output_path)
            except Exception as exc:  # decoders raise a variety of errors
                log.error("ASCII conversion error: %s", exc)
                return _text("Conversion failed", 500)

            try:
                with open(output_path, "rb") as fh:
                    body = fh.read()
            except OSError as exc:
                log.error("Output file not found: %s", exc)
                return _text("Conversion failed", 500)
            finally:
                _remove(output_path, "output file")
            return Response(body, status=200, mimetype="text/plain")
        finally:
            _remove(tmp_path, "temp file")

    @app.post("/banner")
    def banner() -> Response:
        banner_text = request.form.get("bannerText", "")
        if not banner_text:
            return _text("No banner text provided", 400)

        try:
            clean_text = sanitize_banner_text(banner_text)
        except ValueError as exc:
            log.warning("Invalid banner text: %s", exc)
            return _text("Invalid banner text", 400)

        if len(clean_text) > config.max_banner_len:
            return _text("Banner text too long", 400)

        output_path = os.path.join(config.output_dir, f"banner-{uuid.uuid4()}")
        spec = Banner(
            message=clean_text,
            path=output_path,
            width=BANNER_WIDTH,
            height=BANNER_HEIGHT,
            options=BannerOptions(font=BANNER_FONT, reverse=True),
        )
        try:
            render_banner(spec)
        except (BannerError, OSError, ValueError) as exc:
            log.error("Banner generation error: %s", exc)
            return _text("Banner generation failed", 500)

        ascii_path = f"{output_path}.txt"
        try:
            with open(ascii_path, "rb") as fh:
                body = fh.read()
        except OSError as exc:
            log.error("Failed to read ASCII output: %s", exc)
            return _text("Failed to read banner output", 500)
        _remove(ascii_path, "banner ascii file")
        return Response(body, status=200, content_type="text/plain; charset=utf-8")

    return app