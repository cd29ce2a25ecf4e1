"""Request flow for `/rpg/{username}`: validate, cache lookup, fetch, render."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping, Optional

from . import config, github
from .cache import FreshnessCache, get_cache
from .card import render_card, render_error
from .log import get_logger
from .models import Err, ErrorKind, FetchOutcome
from .options import parse_render_options

logger = get_logger(__name__)

SVG_CONTENT_TYPE = "image/svg+xml; charset=utf-8"
NO_CACHE = "no-cache, max-age=0"

ERROR_STATUS = {
    ErrorKind.INVALID_USERNAME: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UPSTREAM_ERROR: 502,
}


@dataclass(frozen=True)
class CardResponse:
    status: int
    body: str
    content_type: str = SVG_CONTENT_TYPE
    headers: dict = field(default_factory=dict)


def success_cache_control() -> str:
    return f"public, max-age={config.BROWSER_CACHE_SECONDS}"


def error_response(kind: ErrorKind, theme: str = "dark", lang: str = "en", status: Optional[int] = None) -> CardResponse:
    return CardResponse(
        status=status or ERROR_STATUS[kind],
        body=render_error(kind, theme, lang),
        headers={"Cache-Control": NO_CACHE},
    )


def build_card_response(
    username: str,
    query: Mapping,
    cache: Optional[FreshnessCache] = None,
    fetch: Optional[Callable[[str], FetchOutcome]] = None,
    now: Optional[datetime] = None,
) -> CardResponse:
    """Produce the SVG response for one card request. The body is always an SVG document."""
    options = parse_render_options(query)
    log = logger.bind(username=username)

    if not github.is_valid_username(username):
        log.info("card_invalid_username")
        return error_response(ErrorKind.INVALID_USERNAME, options.theme, options.lang)

    cache = cache if cache is not None else get_cache()
    record = cache.get(username)
    if record is not None:
        log.info("card_cache_hit")
    else:
        log.info("card_cache_miss")
        fetch = fetch or github.fetch_user
        outcome = fetch(username)
        if isinstance(outcome, Err):
            log.info("card_upstream_failed", kind=outcome.kind.value, upstream_status=outcome.http_status)
            return error_response(outcome.kind, options.theme, options.lang)
        record = outcome.record
        cache.set_async(username, record)

    return CardResponse(
        status=200,
        body=render_card(record, options, now),
        headers={"Cache-Control": success_cache_control()},
    )
