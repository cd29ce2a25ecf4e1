# config.py

import os


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


# --- UPSTREAM ---
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN", "")
USER_AGENT = os.environ.get("USER_AGENT", "GitHub-RPG-Card")
UPSTREAM_TIMEOUT_SECONDS = _env_int("UPSTREAM_TIMEOUT_SECONDS", 5)

# --- CACHING ---
CACHE_TTL_SECONDS = _env_int("CACHE_TTL_SECONDS", 1800)        # 30 min, server side
BROWSER_CACHE_SECONDS = _env_int("BROWSER_CACHE_SECONDS", 300)  # 5 min, downstream caches
KV_REST_API_URL = os.environ.get("KV_REST_API_URL", "")
KV_REST_API_TOKEN = os.environ.get("KV_REST_API_TOKEN", "")

# --- SIDE CHANNELS ---
ANALYTICS_URL = os.environ.get("ANALYTICS_URL", "")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "console")

HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}
if GITHUB_TOKEN:
    HEADERS["Authorization"] = f"token {GITHUB_TOKEN}"
