# options.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .themes import (
    BASE_SIZES, DEFAULT_FONT, DEFAULT_LANG, DEFAULT_THEME, FONTS, LABELS,
    MAX_SCALE, MIN_SCALE, SIZE_ROLES, THEMES, FontSpec, Palette,
)


def size_param(role: str) -> str:
    """Query parameter carrying the multiplier for `role` (e.g. stat-label -> sz_stat_label)."""
    return "sz_" + role.replace("-", "_")


def parse_scale(raw) -> float | None:
    """Return the multiplier if `raw` is a finite number in [0.3, 2.0], else None."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or not (MIN_SCALE <= value <= MAX_SCALE):
        return None
    return value


@dataclass(frozen=True)
class RenderOptions:
    theme: str = DEFAULT_THEME
    lang: str = DEFAULT_LANG
    font: str = DEFAULT_FONT
    sizes: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def palette(self) -> Palette:
        return THEMES[self.theme]

    @property
    def labels(self) -> Mapping[str, str]:
        return LABELS[self.lang]

    @property
    def font_spec(self) -> FontSpec:
        return FONTS[self.font]

    def scale(self, role: str) -> float:
        return self.sizes.get(role, 1.0)

    def font_size(self, role: str) -> float:
        return BASE_SIZES[role] * self.scale(role)


def _first(query: Mapping, key: str):
    value = query.get(key)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def parse_render_options(query: Mapping) -> RenderOptions:
    """Build RenderOptions from a `parse_qs`-style mapping, discarding anything invalid."""
    theme = str(_first(query, "theme") or "").lower()
    lang = str(_first(query, "lang") or "").lower()
    font = str(_first(query, "font") or "").lower()

    sizes = {}
    for role in SIZE_ROLES:
        scale = parse_scale(_first(query, size_param(role)))
        if scale is not None:
            sizes[role] = scale

    return RenderOptions(
        theme=theme if theme in THEMES else DEFAULT_THEME,
        lang=lang if lang in LABELS else DEFAULT_LANG,
        font=font if font in FONTS else DEFAULT_FONT,
        sizes=MappingProxyType(sizes),
    )
