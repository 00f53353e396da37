# recomenfy/spotify.py
# Spotify Web API client used by the playlist pipeline (user-scoped calls).
from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from recomenfy.schemas import ArtistSummary, CreatedPlaylist, TrackCandidate
from recomenfy.selection import track_from_spotify

log = logging.getLogger("recomenfy.spotify")

API_BASE = "https://api.spotify.com/v1"

# Spotify caps
MAX_PAGE = 50
MAX_URIS_PER_ADD = 100

TokenProvider = Callable[[str], Awaitable[str]]


def artist_from_spotify(a: Dict[str, Any]) -> Optional[ArtistSummary]:
    if not a or not isinstance(a, dict) or not a.get("id"):
        return None
    followers = a.get("followers") or {}
    return ArtistSummary(
        id=a["id"],
        name=a.get("name") or "",
        genres=[g for g in (a.get("genres") or []) if isinstance(g, str)],
        images=[i for i in (a.get("images") or []) if isinstance(i, dict)],
        popularity=a.get("popularity"),
        followers=followers.get("total") if isinstance(followers, dict) else None,
        external_url=(a.get("external_urls") or {}).get("spotify", ""),
    )


class SpotifyClient:
    def __init__(
        self,
        token_provider: TokenProvider,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        self.token_provider = token_provider
        self.transport = transport
        self.timeout = timeout

    async def _request(self, user_id: str, method: str, path: str, **kwargs: Any) -> Any:
        token = await self.token_provider(user_id)
        async with httpx.AsyncClient(
            base_url=API_BASE,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            r = await client.request(method, path, **kwargs)
            if r.is_error:
                log.warning("[spotify] %s %s -> %s %s", method, path, r.status_code, r.text[:300])
            r.raise_for_status()
            return r.json() if r.content else None

    async def get_me(self, user_id: str) -> Dict[str, Any]:
        return await self._request(user_id, "GET", "/me")

    async def get_top_tracks(self, user_id: str, time_range: str = "medium_term", limit: int = 50) -> List[TrackCandidate]:
        data = await self._request(
            user_id, "GET", "/me/top/tracks",
            params={"time_range": time_range, "limit": min(limit, MAX_PAGE)},
        )
        items = (data or {}).get("items") or []
        return [t for t in (track_from_spotify(i) for i in items) if t]

    async def get_top_artists(self, user_id: str, time_range: str = "medium_term", limit: int = 20) -> List[ArtistSummary]:
        data = await self._request(
            user_id, "GET", "/me/top/artists",
            params={"time_range": time_range, "limit": min(limit, MAX_PAGE)},
        )
        items = (data or {}).get("items") or []
        return [a for a in (artist_from_spotify(i) for i in items) if a]

    async def search_tracks(self, user_id: str, query: str, limit: int = 50) -> List[TrackCandidate]:
        data = await self._request(
            user_id, "GET", "/search",
            params={"q": query, "type": "track", "limit": min(limit, MAX_PAGE)},
        )
        items = ((data or {}).get("tracks") or {}).get("items") or []
        return [t for t in (track_from_spotify(i) for i in items) if t]

    async def create_playlist(self, user_id: str, name: str, description: str) -> CreatedPlaylist:
        # the endpoint wants the Spotify account id, not our internal user id
        me = await self.get_me(user_id)
        data = await self._request(
            user_id, "POST", f"/users/{me['id']}/playlists",
            json={"name": name, "description": description, "public": True},
        )
        return CreatedPlaylist(
            id=data["id"],
            external_url=(data.get("external_urls") or {}).get("spotify", ""),
        )

    async def add_tracks_to_playlist(self, user_id: str, playlist_id: str, uris: List[str]) -> None:
        for i in range(0, len(uris), MAX_URIS_PER_ADD):
            chunk = uris[i:i + MAX_URIS_PER_ADD]
            await self._request(user_id, "POST", f"/playlists/{playlist_id}/tracks", json={"uris": chunk})

    async def get_user_playlists(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        data = await self._request(user_id, "GET", "/me/playlists", params={"limit": min(limit, MAX_PAGE)})
        return [p for p in ((data or {}).get("items") or []) if isinstance(p, dict)]
