# recomenfy/auth.py
from __future__ import annotations
import base64
import logging
import secrets
import time
import datetime as dt
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

import httpx
import jwt

from recomenfy import config
from recomenfy.datastore import DataStore
from recomenfy.errors import NotAuthenticatedError
from recomenfy.schemas import UserRecord

log = logging.getLogger("recomenfy.auth")

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL     = "https://accounts.spotify.com/api/token"
ME_URL        = "https://api.spotify.com/v1/me"

SCOPES = " ".join([
    "user-top-read",
    "user-library-read",
    "user-read-recently-played",
    "playlist-modify-public",
    "playlist-modify-private",
    "user-read-email",
])

# refresh this many seconds before Spotify's expiry
EXPIRY_SKEW_SECS = 30

JWT_ALGORITHM = "HS256"


class TokenError(Exception):
    """JWT could not be verified. `expired` tells the two 401 flavours apart."""

    def __init__(self, message: str, expired: bool = False):
        super().__init__(message)
        self.expired = expired


# ---- OAuth helpers ----

def _basic_auth_header() -> Dict[str, str]:
    client_id, client_secret = config.require_spotify_credentials()
    auth = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
    return {"Authorization": f"Basic {auth}"}


def create_login_redirect_url(state: str) -> str:
    client_id, _ = config.require_spotify_credentials()
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": config.SPOTIFY_REDIRECT_URI,
        "scope": SCOPES,
        "state": state,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def new_state(store: DataStore) -> str:
    s = secrets.token_urlsafe(24)
    store.add_state(s)
    return s


async def exchange_code_for_tokens(code: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    async with httpx.AsyncClient(timeout=15, transport=transport) as client:
        r = await client.post(
            TOKEN_URL,
            headers=_basic_auth_header(),
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": config.SPOTIFY_REDIRECT_URI,
            },
        )
        r.raise_for_status()
        return r.json()


async def refresh_access_token(refresh_token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    async with httpx.AsyncClient(timeout=15, transport=transport) as client:
        r = await client.post(
            TOKEN_URL,
            headers=_basic_auth_header(),
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
        )
        r.raise_for_status()
        data = r.json()
        # carry forward refresh_token if not returned
        if not data.get("refresh_token"):
            data["refresh_token"] = refresh_token
        return data


async def fetch_spotify_me(access_token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    async with httpx.AsyncClient(timeout=12, transport=transport) as client:
        r = await client.get(ME_URL, headers={"Authorization": f"Bearer {access_token}"})
        r.raise_for_status()
        return r.json()


async def complete_login(
    code: str, store: DataStore, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Tuple[UserRecord, str]:
    """Code -> tokens -> /me -> stored user + tokens -> app JWT."""
    tokens = await exchange_code_for_tokens(code, transport=transport)
    profile = await fetch_spotify_me(tokens["access_token"], transport=transport)
    user = store.upsert_user(profile)
    store.save_spotify_tokens(
        user.id,
        tokens["access_token"],
        tokens.get("refresh_token"),
        int(tokens.get("expires_in", 3600)),
    )
    log.info("[auth] User authenticated: %s (%s)", user.display_name, user.spotify_id)
    return user, generate_token(user)


# ---- Access tokens for API calls ----

class SpotifyTokenProvider:
    """Hands out a fresh Spotify access token per internal user id."""

    def __init__(self, store: DataStore, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.store = store
        self.transport = transport

    async def __call__(self, user_id: str) -> str:
        tok = self.store.get_spotify_tokens(user_id)
        if not tok:
            raise NotAuthenticatedError("User not authenticated")
        if tok.expires_at - int(time.time()) > EXPIRY_SKEW_SECS:
            return tok.access_token
        if not tok.refresh_token:
            raise NotAuthenticatedError("No refresh token available")
        try:
            data = await refresh_access_token(tok.refresh_token, transport=self.transport)
        except httpx.HTTPError as e:
            log.error("[auth] Token refresh failed for user %s: %s", user_id, e)
            raise NotAuthenticatedError("Failed to refresh token") from e
        fresh = self.store.save_spotify_tokens(
            user_id,
            data["access_token"],
            data.get("refresh_token"),
            int(data.get("expires_in", 3600)),
        )
        log.info("[auth] Tokens refreshed for user: %s", user_id)
        return fresh.access_token


# ---- App JWT ----

def _jwt_secret() -> str:
    if not config.JWT_SECRET:
        raise RuntimeError("JWT_SECRET not configured")
    return config.JWT_SECRET


def generate_token(user: UserRecord) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "id": user.id,
        "spotifyId": user.spotify_id,
        "email": user.email,
        "displayName": user.display_name,
        "iat": now,
        "exp": now + dt.timedelta(days=config.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, _jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token expired", expired=True) from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid token") from e
    if not claims.get("id"):
        raise TokenError("Invalid token")
    return claims
