import time

import pytest
from flask import Flask

from img2ascii.ratelimit import RateLimiter, client_ip, install_rate_limiter


@pytest.fixture
def make_limiter():
    created = []

    def factory(limit, window):
        limiter = RateLimiter(limit, window)
        created.append(limiter)
        return limiter

    yield factory
    for limiter in created:
        limiter.stop()


def test_allow(make_limiter):
    limiter = make_limiter(2, 60)
    assert limiter.allow("192.168.1.1") is True
    assert limiter.allow("192.168.1.1") is True
    assert limiter.allow("192.168.1.1") is False
    assert limiter.allow("192.168.1.2") is True


def test_window_expiry(make_limiter):
    limiter = make_limiter(1, 0.1)
    assert limiter.allow("192.168.1.1") is True
    assert limiter.allow("192.168.1.1") is False
    time.sleep(0.15)
    assert limiter.allow("192.168.1.1") is True


def test_purge_drops_stale_clients(make_limiter):
    limiter = make_limiter(5, 60)
    limiter.allow("10.0.0.1")
    limiter.allow("10.0.0.2")
    assert len(limiter) == 2
    limiter.window = 0.01
    time.sleep(0.05)
    limiter.purge()
    assert len(limiter) == 0


def test_stop_ends_cleanup_thread():
    limiter = RateLimiter(1, 0.05)
    assert limiter.running is True
    limiter.stop()
    assert limiter.running is False


def test_context_manager_stops():
    with RateLimiter(1, 60) as limiter:
        assert limiter.allow("10.0.0.9") is True
    assert limiter.running is False


@pytest.mark.parametrize(
    "headers,remote,expected",
    [
        ({"X-Forwarded-For": "192.168.1.1, 10.0.0.1"}, "127.0.0.1", "192.168.1.1"),
        ({"X-Forwarded-For": " 192.168.1.5 "}, "127.0.0.1", "192.168.1.5"),
        ({"X-Real-IP": "192.168.1.2"}, "127.0.0.1", "192.168.1.2"),
        ({}, "10.1.2.3", "10.1.2.3"),
        ({}, None, ""),
    ],
)
def test_client_ip(headers, remote, expected):
    assert client_ip(headers, remote) == expected


def test_middleware(make_limiter):
    app = Flask("ratelimit-test")
    install_rate_limiter(app, make_limiter(1, 60))

    @app.get("/test")
    def _ok():
        return "OK"

    client = app.test_client()
    first = client.get("/test", environ_base={"REMOTE_ADDR": "192.168.1.1"})
    assert first.status_code == 200
    assert first.get_data(as_text=True) == "OK"

    second = client.get("/test", environ_base={"REMOTE_ADDR": "192.168.1.1"})
    assert second.status_code == 429
    assert second.get_json() == {"error": "Rate limit exceeded. Please try again later."}

    third = client.get("/test", environ_base={"REMOTE_ADDR": "192.168.1.2"})
    assert third.status_code == 200