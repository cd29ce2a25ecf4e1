# preview.py

from __future__ import annotations

import html
import json

from .options import size_param
from .themes import (
    DEFAULT_FONT, DEFAULT_LANG, DEFAULT_THEME, FONTS, LABELS, MAX_SCALE, MIN_SCALE, SIZE_ROLES, THEMES,
)

PAGE = """<!DOCTYPE html>
<html><head>
<meta charset="utf-8"><title>RPG Card Preview: {username}</title>
<meta name="viewport" content="width=device-width, initial-scale=1">
<style>
body {{ font-family: system-ui, sans-serif; background: #0d1117; color: #c9d1d9; max-width: 960px; margin: 40px auto; padding: 20px; }}
code, pre {{ background: #161b22; border-radius: 6px; }}
pre {{ padding: 12px; overflow-x: auto; white-space: pre-wrap; word-break: break-all; }}
.layout {{ display: flex; gap: 32px; flex-wrap: wrap; }}
.controls {{ min-width: 280px; }}
.controls label {{ display: block; margin: 8px 0 2px; font-size: 13px; }}
.controls select, .controls input {{ width: 100%; }}
.note {{ font-size: 12px; color: #8b949e; }}
</style>
</head><body>
<h1>@{username}</h1>
<div class="layout">
<div><img id="card" src="{card_path}" alt="RPG status card for {username}"></div>
<form class="controls" id="controls">
<label for="theme">Theme</label><select id="theme" name="theme">{theme_options}</select>
<label for="lang">Language</label><select id="lang" name="lang">{lang_options}</select>
<label for="font">Font</label><select id="font" name="font">{font_options}</select>
{size_controls}
<button type="button" id="reset">Reset sizes</button>
</form>
</div>
<h3>Markdown</h3>
<pre id="snippet"></pre>
<p class="note">Text is not reflowed: large size multipliers can clip at the card edge.
Pixel fonts look crisp only near their native size.</p>
<script>
const base = {card_path_js};
const roles = {size_params_js};
const form = document.getElementById("controls");
function update() {{
  const params = new URLSearchParams();
  ["theme", "lang", "font"].forEach(function (name) {{ params.set(name, form.elements[name].value); }});
  roles.forEach(function (name) {{
    const value = parseFloat(form.elements[name].value);
    document.getElementById(name + "_out").textContent = value.toFixed(1);
    if (value !== 1) {{ params.set(name, value.toFixed(1)); }}
  }});
  const url = base + "?" + params.toString();
  document.getElementById("card").src = url;
  document.getElementById("snippet").textContent = "![RPG card](" + location.origin + url + ")";
}}
form.addEventListener("input", update);
document.getElementById("reset").addEventListener("click", function () {{
  roles.forEach(function (name) {{ form.elements[name].value = 1; }});
  update();
}});
update();
</script>
</body></html>"""


def _select_options(keys, default, describe=str):
    return "".join(
        f'<option value="{html.escape(key)}"{" selected" if key == default else ""}>'
        f'{html.escape(describe(key))}</option>'
        for key in keys
    )


def _size_controls():
    controls = []
    for role in SIZE_ROLES:
        name = size_param(role)
        controls.append(
            f'<label for="{name}">{html.escape(role)} &times; <output id="{name}_out">1.0</output></label>'
            f'<input type="range" id="{name}" name="{name}" min="{MIN_SCALE}" max="{MAX_SCALE}" step="0.1" value="1">'
        )
    return "\n".join(controls)


def render_preview(username: str) -> str:
    """HTML page embedding the card with client-side controls. `username` must already be validated."""
    card_path = f"/rpg/{username}"
    return PAGE.format(
        username=html.escape(username),
        card_path=html.escape(card_path),
        card_path_js=json.dumps(card_path),
        size_params_js=json.dumps([size_param(role) for role in SIZE_ROLES]),
        theme_options=_select_options(THEMES, DEFAULT_THEME),
        lang_options=_select_options(LABELS, DEFAULT_LANG),
        font_options=_select_options(
            FONTS, DEFAULT_FONT, lambda key: f"{FONTS[key].name} ({FONTS[key].category})"
        ),
        size_controls=_size_controls(),
    )
