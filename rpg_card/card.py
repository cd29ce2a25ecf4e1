# card.py

from __future__ import annotations

import math
import re
import unicodedata
from datetime import datetime, timezone
from typing import Optional

from .models import ErrorKind, UserRecord
from .options import RenderOptions, parse_render_options
from .themes import BASE_SIZES, ERROR_MESSAGES

# --- UTILITIES ---
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def escape_xml(text):
    """Sanitize text for SVG output."""
    text = _XML_ILLEGAL.sub("", str(text))
    return (text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
            .replace('"', "&quot;").replace("'", "&#39;"))


def display_width(text):
    """Column width of `text`, counting East Asian wide characters as two."""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def wrap_text(text, max_width, max_lines):
    """Greedy word wrap by display width. Words wider than a line are hard-broken,
    and the last line gets an ellipsis when the text does not fit."""
    lines = []
    current = ""
    for word in _XML_ILLEGAL.sub("", text).split():
        candidate = f"{current} {word}" if current else word
        if display_width(candidate) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ""
        for ch in word:
            if display_width(current + ch) > max_width:
                lines.append(current)
                current = ch
            else:
                current += ch
    if current:
        lines.append(current)

    if len(lines) > max_lines:
        last = lines[max_lines - 1]
        while last and display_width(last) + 1 > max_width:
            last = last[:-1]
        lines = lines[:max_lines - 1] + [last.rstrip() + "…"]
    return lines


def _parse_timestamp(value) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return now if now.tzinfo else now.replace(tzinfo=timezone.utc)


def account_age_days(created_at, now: Optional[datetime] = None) -> int:
    created = _parse_timestamp(created_at)
    if created is None:
        return 0
    return max(0, (_utc(now) - created).days)


def compute_level(record: UserRecord, now: Optional[datetime] = None) -> int:
    """Two levels per year on GitHub, plus bonuses for repositories and followers."""
    years = account_age_days(record.created_at, now) // 365
    level = (1 + 2 * years + math.isqrt(record.public_repos)
             + (record.followers + 1).bit_length() - 1)
    return max(1, min(99, level))


def _px(value):
    return f"{round(value, 2):g}"


# ==========================================
# THE CARD
# ==========================================
class RpgCard:
    WIDTH = 440
    HEIGHT = 300
    ERROR_HEIGHT = 150
    PADDING = 24
    BIO_WIDTH = 44   # display columns
    BIO_LINES = 3
    BAR_X = 64
    BAR_WIDTH = 272
    BAR_HEIGHT = 12

    def __init__(self, options: RenderOptions):
        self.options = options
        self.palette = options.palette
        self.labels = options.labels

    def _text(self, x, y, role, content, fill, anchor=None, size=None):
        anchor_attr = f' text-anchor="{anchor}"' if anchor else ""
        size = self.options.font_size(role) if size is None else size
        return (f'<text x="{_px(x)}" y="{_px(y)}" class="{role}" font-size="{_px(size)}" '
                f'fill="{fill}"{anchor_attr}>{content}</text>')

    def _render_frame(self, height, label, body):
        """Wraps content in the double-bordered window shared by every card."""
        w, p, font = self.WIDTH, self.palette, self.options.font_spec
        rendering = ' shape-rendering="crispEdges"' if font.category == "pixel" else ""
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{height}" '
            f'viewBox="0 0 {w} {height}" role="img" aria-label="{escape_xml(label)}"{rendering}>'
            f'<title>{escape_xml(label)}</title>'
            f'<style>text {{ font-family: {font.family}; }} .title, .level {{ font-weight: bold; }}</style>'
            f'<rect x="4" y="4" width="{w - 8}" height="{height - 8}" rx="8" '
            f'fill="{p.background}" stroke="{p.border}" stroke-width="4"/>'
            f'<rect x="12" y="12" width="{w - 24}" height="{height - 24}" rx="4" '
            f'fill="none" stroke="{p.inner_border}" stroke-width="2"/>'
            f'{body}'
            f'</svg>'
        )

    def _render_header(self, record, now):
        p, pad = self.palette, self.PADDING
        parts = [
            self._text(pad, 38, "title", escape_xml(self.labels["title"]), p.accent),
            f'<line x1="{pad}" y1="48" x2="{self.WIDTH - pad}" y2="48" stroke="{p.inner_border}" stroke-width="2"/>',
            self._text(pad, 76, "level",
                       f'{escape_xml(self.labels["level"])} {compute_level(record, now)}', p.accent),
        ]
        if record.display_name:
            name = (f'{escape_xml(record.display_name)} '
                    f'<tspan fill="{p.muted}">@{escape_xml(record.login)}</tspan>')
        else:
            name = f"@{escape_xml(record.login)}"
        parts.append(self._text(pad, 102, "username", name, p.text))
        return parts

    def _render_bio(self, bio):
        p = self.palette
        lines = wrap_text(bio or "", self.BIO_WIDTH, self.BIO_LINES)
        fill = p.text
        if not lines:
            lines, fill = [self.labels["no_bio"]], p.muted
        line_height = self.options.font_size("bio") * 1.35
        return [
            self._text(self.PADDING, 126 + i * line_height, "bio", escape_xml(line), fill)
            for i, line in enumerate(lines)
        ]

    def _render_stats(self, record, now):
        p = self.palette
        stats = [
            (self.labels["repos"], f"{record.public_repos:,}"),
            (self.labels["following"], f"{record.following:,}"),
            (self.labels["followers"], f"{record.followers:,}"),
            (self.labels["age"], f'{account_age_days(record.created_at, now):,} {self.labels["days"]}'),
        ]
        columns = [(self.PADDING, 204), (228, self.WIDTH - self.PADDING)]
        parts = []
        for i, (label, value) in enumerate(stats):
            label_x, value_x = columns[i % 2]
            y = 186 + (i // 2) * 24
            parts.append(self._text(label_x, y, "stat-label", escape_xml(label), p.muted))
            parts.append(self._text(value_x, y, "stat-value", escape_xml(value), p.text, anchor="end"))
        return parts

    def _render_bars(self, record):
        """Followers (HP) and following (MP), both scaled against the larger of the two."""
        p = self.palette
        peak = max(record.followers, record.following, 1)
        bars = [
            (self.labels["hp"], record.followers, p.hp),
            (self.labels["mp"], record.following, p.mp),
        ]
        parts = []
        for i, (label, value, color) in enumerate(bars):
            y = 240 + i * 26
            top = y - self.BAR_HEIGHT + 2
            width = self.BAR_WIDTH * value / peak
            parts.extend([
                self._text(self.PADDING, y, "bar-label", escape_xml(label), p.accent),
                f'<rect x="{self.BAR_X}" y="{top}" width="{self.BAR_WIDTH}" height="{self.BAR_HEIGHT}" '
                f'fill="{p.bar_track}" stroke="{p.inner_border}" stroke-width="1"/>',
                f'<rect x="{self.BAR_X}" y="{top}" width="{_px(width)}" height="{self.BAR_HEIGHT}" fill="{color}"/>',
                self._text(self.WIDTH - self.PADDING, y, "bar-label", f"{value:,}", p.text, anchor="end"),
            ])
        return parts

    def render(self, record: UserRecord, now: Optional[datetime] = None) -> str:
        now = _utc(now)
        body = (self._render_header(record, now) + self._render_bio(record.bio)
                + self._render_stats(record, now) + self._render_bars(record))
        label = f"{record.login}: {self.labels['title']}"
        return self._render_frame(self.HEIGHT, label, "".join(body))

    def render_error(self, kind: ErrorKind) -> str:
        """Minimal card for a failed lookup. Uses base font sizes and no profile data."""
        p, pad = self.palette, self.PADDING
        kind = ErrorKind(kind)
        headline, hint = ERROR_MESSAGES[self.options.lang][kind.value]
        title = self.labels["error_title"]
        body = [
            self._text(pad, 38, "title", escape_xml(title), p.error, size=BASE_SIZES["title"]),
            f'<line x1="{pad}" y1="48" x2="{self.WIDTH - pad}" y2="48" stroke="{p.inner_border}" stroke-width="2"/>',
            self._text(pad, 82, "username", escape_xml(headline), p.text, size=BASE_SIZES["username"]),
            self._text(pad, 110, "bio", escape_xml(hint), p.muted, size=BASE_SIZES["bio"]),
        ]
        return self._render_frame(self.ERROR_HEIGHT, f"{title}: {headline}", "".join(body))


def render_card(record: UserRecord, options: RenderOptions, now: Optional[datetime] = None) -> str:
    return RpgCard(options).render(record, now)


def render_error(kind: ErrorKind, theme: str = "dark", lang: str = "en") -> str:
    return RpgCard(parse_render_options({"theme": theme, "lang": lang})).render_error(kind)
