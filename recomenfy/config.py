# recomenfy/config.py
from __future__ import annotations
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(), override=False)

# ---- Spotify ----
SPOTIFY_CLIENT_ID     = (os.getenv("SPOTIFY_CLIENT_ID") or "").strip()
SPOTIFY_CLIENT_SECRET = (os.getenv("SPOTIFY_CLIENT_SECRET") or "").strip()
SPOTIFY_REDIRECT_URI  = (os.getenv("SPOTIFY_REDIRECT_URI") or "http://127.0.0.1:8000/auth/callback").strip()
FRONTEND_URL          = os.getenv("FRONTEND_URL", "http://localhost:3001")

# ---- JWT ----
JWT_SECRET       = os.getenv("JWT_SECRET", "")
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

# ---- OpenAI ----
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL   = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# ---- Storage ----
DATA_DIR = Path(os.getenv("RECOMENFY_DATA_DIR", str(Path.cwd() / ".appdata")))

# ---- Playlist pipeline ----
PLAYLIST_TRACK_LIMIT = int(os.getenv("PLAYLIST_TRACK_LIMIT", "30"))

# ---- Server ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_default_origins: List[str] = [
    "http://localhost:3001", "http://127.0.0.1:3001",
    "http://localhost", "http://127.0.0.1",
]
_env_origins = (os.getenv("CORS_ORIGINS") or "").strip()
CORS_ORIGINS: List[str] = (
    [o.strip() for o in _env_origins.split(",") if o.strip()]
    if _env_origins else _default_origins
)


def require_spotify_credentials() -> tuple[str, str]:
    if not SPOTIFY_CLIENT_ID or not SPOTIFY_CLIENT_SECRET:
        raise RuntimeError("Missing SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET in .env")
    return SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET
