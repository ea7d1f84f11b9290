"""Application settings, start-up checks and the server entry point."""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from flask import Flask, send_from_directory

from img2ascii.handlers import (
    DEFAULT_MAX_BANNER_LEN,
    DEFAULT_MAX_UPLOAD_SIZE,
    Config,
    create_app,
)
from img2ascii.ratelimit import RateLimiter, install_rate_limiter

log = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "/tmp/img2ascii"
DEFAULT_OUTPUT_FILE = "/tmp/img2ascii/output.txt"
DEFAULT_WWW_DIR = "/tmp/img2ascii/www"
DEFAULT_TEMPLATE = os.path.join("source", "www", "index.html")

RATE_LIMIT = 10
RATE_WINDOW = 60.0

LIMITER_KEY = "rate_limiter"


@dataclass
class Settings:
    """Server configuration."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    output_file: str = DEFAULT_OUTPUT_FILE
    www_dir: str = DEFAULT_WWW_DIR
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    max_banner_len: int = DEFAULT_MAX_BANNER_LEN
    template_path: str = DEFAULT_TEMPLATE


def get_env(key: str, fallback: str) -> str:
    """The environment variable ``key``, or ``fallback`` when unset or empty."""
    return os.environ.get(key) or fallback


def load_settings() -> Settings:
    """Settings with paths taken from the environment."""
    return Settings(
        output_dir=get_env("IMG2ASCII_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        output_file=get_env("IMG2ASCII_OUTPUT_FILE", DEFAULT_OUTPUT_FILE),
        www_dir=get_env("IMG2ASCII_WWW_DIR", DEFAULT_WWW_DIR),
    )


def check_and_populate(settings: Settings) -> None:
    """Validate limits and create the directories and output file if missing.

    Raises ValueError for invalid limits and OSError when creation fails.
    """
    if settings.max_upload_size <= 0:
        raise ValueError(f"invalid max upload size: {settings.max_upload_size}")
    if settings.max_banner_len <= 0:
        raise ValueError(f"invalid max banner length: {settings.max_banner_len}")

    output_dir = Path(settings.output_dir)
    if not output_dir.exists():
        try:
            output_dir.mkdir(mode=0o700, parents=True)
        except OSError as exc:
            log.error("Failed to create outputDir: %s", exc)
            raise
    www_dir = Path(settings.www_dir)
    if not www_dir.exists():
        try:
            www_dir.mkdir(mode=0o700)
        except OSError as exc:
            log.error("Failed to create wwwDir: %s", exc)
            raise
    output_file = Path(settings.output_file)
    if not output_file.exists():
        try:
            output_file.touch()
        except OSError as exc:
            log.error("Failed to create outputFile: %s", exc)
            raise


def build_app(settings: Settings) -> Flask:
    """Assemble the application: handlers, rate limiting and static files.

    Raises OSError when the page template cannot be read.
    """
    template = Path(settings.template_path).read_text(encoding="utf-8")
    config = Config(
        output_dir=settings.output_dir,
        max_upload_size=settings.max_upload_size,
        max_banner_len=settings.max_banner_len,
        template=template,
    )
    app = create_app(config)

    limiter = RateLimiter(RATE_LIMIT, RATE_WINDOW)
    install_rate_limiter(app, limiter)
    app.extensions[LIMITER_KEY] = limiter

    static_root = os.path.abspath(settings.www_dir)

    def static_file(filename: str):
        return send_from_directory(static_root, filename)

    app.add_url_rule("/static/<path:filename>", "static", static_file)
    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the web server; returns a process exit status."""
    parser = argparse.ArgumentParser(prog="img2ascii", description="Image to ASCII art server.")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    settings = load_settings()
    try:
        check_and_populate(settings)
    except (OSError, ValueError) as exc:
        log.error("Startup error: %s", exc)
        return 1
    try:
        app = build_app(settings)
    except OSError as exc:
        log.error("Static/template error: %s", exc)
        return 1

    limiter = app.extensions[LIMITER_KEY]
    try:
        app.run(host=args.host, port=args.port)
    except OSError as exc:
        log.error("Server error: %s", exc)
        return 1
    finally:
        limiter.stop()
    return 0