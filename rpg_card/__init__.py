"""RPG-style GitHub profile status cards rendered as SVG."""

from .card import render_card, render_error
from .github import fetch_user, is_valid_username
from .models import Err, ErrorKind, FetchOutcome, Ok, UserRecord
from .options import RenderOptions, parse_render_options
from .orchestrator import CardResponse, build_card_response

__all__ = [
    "CardResponse",
    "Err",
    "ErrorKind",
    "FetchOutcome",
    "Ok",
    "RenderOptions",
    "UserRecord",
    "build_card_response",
    "fetch_user",
    "is_valid_username",
    "parse_render_options",
    "render_card",
    "render_error",
]
