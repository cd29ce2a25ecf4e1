# themes.py

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class Palette:
    background: str
    border: str
    inner_border: str
    text: str
    muted: str
    accent: str
    bar_track: str
    hp: str
    mp: str
    error: str


@dataclass(frozen=True)
class FontSpec:
    name: str
    family: str
    category: str  # "pixel" or "monospace"


THEMES = MappingProxyType({
    "dark": Palette(
        background="#1a1c2c", border="#f4f4f4", inner_border="#566c86",
        text="#f4f4f4", muted="#94b0c2", accent="#ffcd75",
        bar_track="#333c57", hp="#38b764", mp="#41a6f6", error="#ef7d57",
    ),
    "light": Palette(
        background="#fcf8ec", border="#1a1c2c", inner_border="#94b0c2",
        text="#1a1c2c", muted="#566c86", accent="#b13e53",
        bar_track="#d8d4c8", hp="#257179", mp="#3b5dc9", error="#b13e53",
    ),
})
DEFAULT_THEME = "dark"

LABELS = MappingProxyType({
    "en": MappingProxyType({
        "title": "STATUS",
        "level": "LV",
        "repos": "REPOS",
        "followers": "FOLLOWERS",
        "following": "FOLLOWING",
        "age": "JOURNEY",
        "days": "days",
        "hp": "HP",
        "mp": "MP",
        "no_bio": "No bio. A quiet adventurer.",
        "error_title": "ERROR",
    }),
    "ja": MappingProxyType({
        "title": "ステータス",
        "level": "レベル",
        "repos": "リポジトリ",
        "followers": "フォロワー",
        "following": "フォロー",
        "age": "冒険日数",
        "days": "日",
        "hp": "HP",
        "mp": "MP",
        "no_bio": "自己紹介はまだない。",
        "error_title": "エラー",
    }),
})
DEFAULT_LANG = "en"

ERROR_MESSAGES = MappingProxyType({
    "en": MappingProxyType({
        "not_found": ("User not found.", "Check the username and try again."),
        "rate_limited": ("Rate limited by GitHub.", "Try again later."),
        "upstream_error": ("GitHub could not be reached.", "Try again later."),
        "invalid_username": ("Invalid username.", "Use letters, digits and hyphens."),
    }),
    "ja": MappingProxyType({
        "not_found": ("ユーザーが見つかりません。", "ユーザー名を確認してください。"),
        "rate_limited": ("GitHubのレート制限中です。", "しばらくしてから再試行してください。"),
        "upstream_error": ("GitHubに接続できません。", "しばらくしてから再試行してください。"),
        "invalid_username": ("ユーザー名が不正です。", "英数字とハイフンのみ使用できます。"),
    }),
})

FONTS = MappingProxyType({
    "dotgothic16": FontSpec("DotGothic16", "'DotGothic16', 'MS Gothic', monospace", "pixel"),
    "press-start-2p": FontSpec("Press Start 2P", "'Press Start 2P', 'Courier New', monospace", "pixel"),
    "silkscreen": FontSpec("Silkscreen", "'Silkscreen', 'Courier New', monospace", "pixel"),
    "vt323": FontSpec("VT323", "'VT323', 'Courier New', monospace", "pixel"),
    "monospace": FontSpec("Monospace", "'SFMono-Regular', Consolas, 'Liberation Mono', monospace", "monospace"),
})
DEFAULT_FONT = "dotgothic16"

# Text roles and their unscaled font sizes in px.
BASE_SIZES = MappingProxyType({
    "title": 16.0,
    "level": 20.0,
    "username": 15.0,
    "bio": 12.0,
    "stat-label": 12.0,
    "stat-value": 12.0,
    "bar-label": 11.0,
})
SIZE_ROLES = tuple(BASE_SIZES)
MIN_SCALE = 0.3
MAX_SCALE = 2.0
