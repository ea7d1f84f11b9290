"""In-memory per-client rate limiting."""

from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from typing import Any, Optional

from flask import Flask, jsonify, request

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


class RateLimiter:
    """Allow at most ``limit`` requests per client in any ``window`` seconds.

    A background thread drops stale entries once per window until ``stop``.
    """

    def __init__(self, limit: int, window: float) -> None:
        self.limit = limit
        self.window = float(window)
        self._requests: dict[str, list[float]] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._janitor = threading.Thread(
            target=self._cleanup_loop, name="rate-limiter-cleanup", daemon=True
        )
        self._janitor.start()

    def __enter__(self) -> "RateLimiter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)

    @property
    def running(self) -> bool:
        return self._janitor.is_alive()

    def allow(self, client_ip: str) -> bool:
        """Record a request from ``client_ip`` if it is within the limit."""
        with self._lock:
            now = time.monotonic()
            cutoff = now - self.window
            recent = [t for t in self._requests.get(client_ip, []) if t > cutoff]
            if len(recent) >= self.limit:
                return False
            recent.append(now)
            self._requests[client_ip] = recent
            return True

    def purge(self) -> None:
        """Forget requests older than the window, and clients with none left."""
        with self._lock:
            cutoff = time.monotonic() - self.window
            fresh = {
                ip: [t for t in stamps if t > cutoff] for ip, stamps in self._requests.items()
            }
            self._requests = {ip: stamps for ip, stamps in fresh.items() if stamps}

    def stop(self) -> None:
        """Stop the background cleanup."""
        self._stopped.set()
        if self._janitor is not threading.current_thread():
            self._janitor.join(timeout=1.0)

    def _cleanup_loop(self) -> None:
        while not self._stopped.wait(self.window):
            self.purge()


def client_ip(headers: Mapping[str, str], remote_addr: Optional[str]) -> str:
    """The client's address, preferring proxy headers over the peer address."""
    forwarded = headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    real_ip = headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return remote_addr or ""


def install_rate_limiter(app: Flask, limiter: RateLimiter) -> None:
    """Reject requests over the limit with HTTP 429 before they reach a view."""

    @app.before_request
    def _enforce_rate_limit():
        if not limiter.allow(client_ip(request.headers, request.remote_addr)):
            return jsonify(error=RATE_LIMIT_MESSAGE), 429
        return None