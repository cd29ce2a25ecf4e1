# handlers.py

from __future__ import annotations

from http.server import BaseHTTPRequestHandler
from urllib.parse import parse_qs, unquote, urlparse

from . import analytics
from .github import is_valid_username
from .log import get_logger
from .models import ErrorKind
from .orchestrator import build_card_response, error_response
from .preview import render_preview

logger = get_logger(__name__)

HEALTH_TEXT = "GitHub Profile Card - OK"


def parse_request(handler: BaseHTTPRequestHandler):
    parsed = urlparse(handler.path)
    return parsed.path, parse_qs(parsed.query)


def username_from(path: str, prefix: str, query: dict) -> str:
    """`?username=` wins (Vercel rewrites), otherwise the path segment after `prefix`."""
    if query.get("username"):
        return query["username"][0]
    if path.startswith(prefix):
        return unquote(path[len(prefix):].strip("/"))
    return ""


def send(handler: BaseHTTPRequestHandler, status: int, body: str, content_type: str, headers=None):
    payload = body.encode()
    handler.send_response(status)
    handler.send_header("Content-Type", content_type)
    handler.send_header("Content-Length", str(len(payload)))
    for name, value in (headers or {}).items():
        handler.send_header(name, value)
    handler.end_headers()
    handler.wfile.write(payload)

    client = getattr(handler, "client_address", None)
    try:
        analytics.log_request(handler.path, status, handler.headers, client[0] if client else None)
    except Exception as e:
        logger.debug("analytics_enqueue_failed", error=str(e))


def respond_with_card(handler: BaseHTTPRequestHandler):
    path, query = parse_request(handler)
    username = username_from(path, "/rpg/", query)
    try:
        response = build_card_response(username, query)
    except Exception:
        logger.exception("card_failed", username=username)
        response = error_response(ErrorKind.UPSTREAM_ERROR, status=500)
    send(handler, response.status, response.body, response.content_type, response.headers)


def respond_with_preview(handler: BaseHTTPRequestHandler):
    path, query = parse_request(handler)
    username = username_from(path, "/preview/", query)
    if not is_valid_username(username):
        send(handler, 400, "Invalid GitHub username", "text/plain; charset=utf-8")
        return
    send(handler, 200, render_preview(username), "text/html; charset=utf-8", {"Cache-Control": "no-cache, max-age=0"})


def respond_with_health(handler: BaseHTTPRequestHandler):
    send(handler, 200, HEALTH_TEXT, "text/plain; charset=utf-8")


def respond_not_found(handler: BaseHTTPRequestHandler):
    send(handler, 404, "Not Found", "text/plain; charset=utf-8")
