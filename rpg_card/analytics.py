"""Best-effort request logging to an external analytics endpoint."""

from __future__ import annotations

import json
import urllib.request
from typing import Mapping, Optional

from . import background, config
from .log import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "card"


def build_event(path: str, status: int, headers: Mapping, client_ip: Optional[str] = None) -> dict:
    forwarded = (headers.get("X-Forwarded-For") or "").split(",")[0].strip()
    return {
        "service": SERVICE_NAME,
        "path": path,
        "status": status,
        "ip": forwarded or headers.get("X-Real-IP") or client_ip or "0.0.0.0",
        "country": headers.get("X-Vercel-IP-Country") or "XX",
        "city": headers.get("X-Vercel-IP-City") or "Unknown",
        "userAgent": headers.get("User-Agent") or "",
        "referer": headers.get("Referer") or "",
    }


def _post(url: str, event: dict) -> None:
    req = urllib.request.Request(
        url,
        data=json.dumps(event).encode(),
        headers={"Content-Type": "application/json", "User-Agent": config.USER_AGENT},
        method="POST",
    )
    try:
        with urllib.request.urlopen(req, timeout=config.UPSTREAM_TIMEOUT_SECONDS) as resp:
            resp.read()
    except Exception as e:
        logger.debug("analytics_post_failed", url=url, error=str(e))


def log_request(path: str, status: int, headers: Mapping, client_ip: Optional[str] = None, url: Optional[str] = None):
    """Queue an analytics event after the response has been written. No-op when unconfigured."""
    url = url if url is not None else config.ANALYTICS_URL
    if not url:
        return None
    try:
        event = build_event(path, status, headers, client_ip)
    except Exception as e:
        logger.debug("analytics_event_failed", error=str(e))
        return None
    return background.submit(_post, url, event)
