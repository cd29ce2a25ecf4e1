"""Route tests against the local development server on an ephemeral port."""

import threading
import time
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET

import pytest

from rpg_card import analytics, background, config, github
from rpg_card import cache as cache_module
from rpg_card.cache import FreshnessCache, MemoryKV
from rpg_card.models import Err, ErrorKind, Ok
from rpg_card.server import make_server


class FakeFetch:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def __call__(self, username):
        self.calls.append(username)
        return self.outcome


@pytest.fixture
def shared_cache(monkeypatch):
    cache = FreshnessCache(MemoryKV())
    monkeypatch.setattr(cache_module, "_shared", cache)
    return cache


@pytest.fixture
def fetch(monkeypatch, alice):
    fake = FakeFetch(Ok(alice))
    monkeypatch.setattr(github, "fetch_user", fake)
    return fake


@pytest.fixture
def base_url(monkeypatch, shared_cache, fetch):
    monkeypatch.setattr(config, "ANALYTICS_URL", "")
    server = make_server("127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def wait_for(predicate, timeout=2.0):
    """The analytics event is queued after the body is written, so the client can finish first."""
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        time.sleep(0.01)
    return predicate()


def get(url):
    opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))
    try:
        with opener.open(url, timeout=5) as resp:
            return resp.status, resp.headers, resp.read().decode()
    except urllib.error.HTTPError as e:
        return e.code, e.headers, e.read().decode()


def test_health(base_url):
    status, headers, body = get(base_url + "/")
    assert status == 200
    assert headers["Content-Type"].startswith("text/plain")
    assert "OK" in body


def test_card_route(base_url, fetch):
    status, headers, body = get(base_url + "/rpg/alice?theme=light&sz_bio=1.5")
    assert status == 200
    assert headers["Content-Type"] == "image/svg+xml; charset=utf-8"
    assert headers["Cache-Control"].startswith("public, max-age=")
    assert ET.fromstring(body).tag.endswith("svg")
    assert fetch.calls == ["alice"]


def test_card_route_accepts_username_query(base_url, fetch):
    status, _, _ = get(base_url + "/rpg/?username=alice")
    assert status == 200
    assert fetch.calls == ["alice"]


def test_card_route_serves_cache_on_repeat(base_url, fetch):
    get(base_url + "/rpg/alice")
    assert background.drain()
    get(base_url + "/rpg/alice")
    assert fetch.calls == ["alice"]


def test_invalid_username_is_400_svg(base_url, fetch, shared_cache):
    status, headers, body = get(base_url + "/rpg/bad_user%21")
    assert status == 400
    assert headers["Content-Type"].startswith("image/svg+xml")
    assert ET.fromstring(body).tag.endswith("svg")
    assert fetch.calls == []


def test_upstream_not_found(base_url, fetch, shared_cache):
    fetch.outcome = Err(ErrorKind.NOT_FOUND, 404)
    status, _, body = get(base_url + "/rpg/does-not-exist-999")
    assert background.drain()
    assert status == 404
    assert "User not found." in body
    assert shared_cache.get("does-not-exist-999") is None


def test_unexpected_failure_still_returns_svg(base_url, monkeypatch):
    def explode(username):
        raise RuntimeError("boom")

    monkeypatch.setattr(github, "fetch_user", explode)
    status, headers, body = get(base_url + "/rpg/alice")
    assert status == 500
    assert headers["Content-Type"].startswith("image/svg+xml")
    assert ET.fromstring(body).tag.endswith("svg")


def test_preview_page(base_url, fetch):
    status, headers, body = get(base_url + "/preview/alice")
    assert status == 200
    assert headers["Content-Type"].startswith("text/html")
    assert 'src="/rpg/alice"' in body
    assert fetch.calls == []


def test_preview_rejects_invalid_username(base_url):
    status, headers, body = get(base_url + "/preview/bad_user%21")
    assert status == 400
    assert headers["Content-Type"].startswith("text/plain")


def test_unknown_route(base_url):
    status, _, _ = get(base_url + "/nope")
    assert status == 404


def test_analytics_event_sent_after_response(base_url, monkeypatch):
    events = []
    monkeypatch.setattr(config, "ANALYTICS_URL", "https://analytics.example/log")
    monkeypatch.setattr(analytics, "_post", lambda url, event: events.append((url, event)))

    status, _, _ = get(base_url + "/rpg/alice")
    assert wait_for(lambda: events)

    assert status == 200
    assert len(events) == 1
    url, event = events[0]
    assert url == "https://analytics.example/log"
    assert event["service"] == "card"
    assert event["path"] == "/rpg/alice"
    assert event["status"] == 200


def test_analytics_failure_does_not_affect_response(base_url, monkeypatch):
    def broken(url, event):
        raise ConnectionError("analytics down")

    monkeypatch.setattr(config, "ANALYTICS_URL", "https://analytics.example/log")
    monkeypatch.setattr(analytics, "_post", broken)

    status, _, body = get(base_url + "/rpg/alice")
    assert background.drain()
    assert status == 200
    assert ET.fromstring(body).tag.endswith("svg")


def test_analytics_scheduling_error_does_not_affect_response(base_url, monkeypatch):
    def refuse(*args):
        raise RuntimeError("cannot schedule new futures after shutdown")

    monkeypatch.setattr(analytics, "log_request", refuse)

    status, headers, body = get(base_url + "/rpg/alice")
    assert status == 200
    assert headers["Content-Type"].startswith("image/svg+xml")
    assert ET.fromstring(body).tag.endswith("svg")
