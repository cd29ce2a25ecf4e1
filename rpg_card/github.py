# github.py

from __future__ import annotations

import http.client
import json
import re
import urllib.error
import urllib.request
from urllib.parse import quote

from . import config
from .log import get_logger
from .models import Err, ErrorKind, FetchOutcome, Ok, UserRecord

logger = get_logger(__name__)

# 1-39 chars, alphanumerics separated by single hyphens, no leading/trailing hyphen.
USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


def is_valid_username(username) -> bool:
    return isinstance(username, str) and USERNAME_RE.match(username) is not None


def _is_rate_limited(status, headers) -> bool:
    if status in (403, 429):
        return True
    return headers is not None and headers.get("X-RateLimit-Remaining") == "0"


def fetch_user(username: str) -> FetchOutcome:
    """Look up a public profile. Never raises: every failure comes back as an `Err`."""
    if not is_valid_username(username):
        return Err(ErrorKind.INVALID_USERNAME)

    url = f"{config.GITHUB_API_URL}/users/{quote(username)}"
    req = urllib.request.Request(url, headers=config.HEADERS)
    try:
        with urllib.request.urlopen(req, timeout=config.UPSTREAM_TIMEOUT_SECONDS) as resp:
            status = resp.status
            payload = json.load(resp)
    except urllib.error.HTTPError as e:
        if e.code == 404:
            kind = ErrorKind.NOT_FOUND
        elif _is_rate_limited(e.code, e.headers):
            kind = ErrorKind.RATE_LIMITED
        else:
            kind = ErrorKind.UPSTREAM_ERROR
        logger.info("upstream_error_status", username=username, status=e.code, kind=kind.value)
        return Err(kind, e.code)
    except (urllib.error.URLError, OSError, http.client.HTTPException, ValueError) as e:
        # HTTPException covers truncated bodies and garbled status lines, ValueError a body that is not JSON
        logger.warning("upstream_unreachable", username=username, error=str(e))
        return Err(ErrorKind.UPSTREAM_ERROR)

    if not 200 <= status < 300:
        return Err(ErrorKind.UPSTREAM_ERROR, status)
    try:
        record = UserRecord.from_github(payload if isinstance(payload, dict) else {})
    except ValueError as e:
        logger.warning("upstream_bad_payload", username=username, error=str(e))
        return Err(ErrorKind.UPSTREAM_ERROR, status)

    logger.debug("upstream_fetched", username=username, login=record.login)
    return Ok(record)
