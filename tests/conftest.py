"""Shared fakes and fixtures."""

import asyncio
from typing import Any, Dict, List, Optional

import httpx
import pytest

from recomenfy import config
from recomenfy.schemas import (
    ArtistSummary,
    CreatedPlaylist,
    PlaylistConcept,
    TrackCandidate,
)


def run(coro):
    return asyncio.run(coro)


def make_tracks(n: int, prefix: str = "t") -> List[TrackCandidate]:
    return [
        TrackCandidate(id=f"{prefix}{i}", name=f"Song {i}", artist=f"Artist {i}", uri=f"spotify:track:{prefix}{i}")
        for i in range(n)
    ]


def make_artists(n: int, genres: List[str]) -> List[ArtistSummary]:
    return [ArtistSummary(id=f"a{i}", name=f"Artist {i}", genres=list(genres)) for i in range(n)]


def make_concept(name: str = "Road Trip Anthems", **overrides: Any) -> PlaylistConcept:
    fields: Dict[str, Any] = {
        "name": name,
        "description": "Windows down.",
        "target_energy_range": (0.6, 0.9),
        "target_valence_range": (0.5, 0.9),
        "preferred_genres": ["pop"],
        "novelty": 0.3,
    }
    fields.update(overrides)
    return PlaylistConcept(**fields)


class FakeCatalog:
    """In-memory CatalogGateway recording every call."""

    def __init__(
        self,
        top_tracks: Optional[List[TrackCandidate]] = None,
        top_artists: Optional[List[ArtistSummary]] = None,
        search_results: Optional[List[TrackCandidate]] = None,
        fail: Optional[set] = None,
    ):
        self.top_tracks = top_tracks or []
        self.top_artists = top_artists or []
        self.search_results = search_results or []
        self.fail = fail or set()
        self.calls: List[tuple] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise httpx.ConnectError(f"{name} unreachable")

    @property
    def write_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("create_playlist", "add_tracks_to_playlist")]

    async def get_top_tracks(self, user_id, time_range="medium_term", limit=50):
        self.calls.append(("get_top_tracks", user_id, time_range, limit))
        self._maybe_fail("get_top_tracks")
        return list(self.top_tracks[:limit])

    async def get_top_artists(self, user_id, time_range="medium_term", limit=20):
        self.calls.append(("get_top_artists", user_id, time_range, limit))
        self._maybe_fail("get_top_artists")
        return list(self.top_artists[:limit])

    async def search_tracks(self, user_id, query, limit=50):
        self.calls.append(("search_tracks", user_id, query, limit))
        self._maybe_fail("search_tracks")
        return list(self.search_results[:limit])

    async def create_playlist(self, user_id, name, description):
        self.calls.append(("create_playlist", user_id, name, description))
        self._maybe_fail("create_playlist")
        return CreatedPlaylist(id="pl1", external_url="https://open.spotify.com/playlist/pl1")

    async def add_tracks_to_playlist(self, user_id, playlist_id, uris):
        self.calls.append(("add_tracks_to_playlist", user_id, playlist_id, list(uris)))
        self._maybe_fail("add_tracks_to_playlist")

    async def get_user_playlists(self, user_id, limit=50):
        self.calls.append(("get_user_playlists", user_id, limit))
        self._maybe_fail("get_user_playlists")
        return [{"id": "sp1", "name": "Mine"}]


class FakeConceptGateway:
    def __init__(self, concept: Optional[PlaylistConcept] = None, error: Optional[Exception] = None):
        self.concept = concept or make_concept()
        self.error = error
        self.calls: List[tuple] = []

    async def generate_concept(self, profile):
        self.calls.append(("profile", profile))
        if self.error:
            raise self.error
        return self.concept

    async def generate_concept_from_keywords(self, keywords, profile):
        self.calls.append(("keywords", keywords, profile))
        if self.error:
            raise self.error
        return self.concept


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret")
    return "test-secret"


@pytest.fixture
def spotify_creds(monkeypatch):
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_ID", "cid")
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_SECRET", "csecret")
    monkeypatch.setattr(config, "SPOTIFY_REDIRECT_URI", "http://127.0.0.1:8000/auth/callback")
