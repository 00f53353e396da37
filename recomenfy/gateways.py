# recomenfy/gateways.py
# Capability interfaces the playlist pipeline depends on.
from __future__ import annotations
from typing import Any, Dict, List, Protocol

from recomenfy.schemas import (
    ArtistSummary,
    CreatedPlaylist,
    PlaylistConcept,
    PlaylistRecord,
    TasteProfile,
    TrackCandidate,
)


class CatalogGateway(Protocol):
    async def get_top_tracks(self, user_id: str, time_range: str = "medium_term", limit: int = 50) -> List[TrackCandidate]: ...

    async def get_top_artists(self, user_id: str, time_range: str = "medium_term", limit: int = 20) -> List[ArtistSummary]: ...

    async def search_tracks(self, user_id: str, query: str, limit: int = 50) -> List[TrackCandidate]: ...

    async def create_playlist(self, user_id: str, name: str, description: str) -> CreatedPlaylist: ...

    async def add_tracks_to_playlist(self, user_id: str, playlist_id: str, uris: List[str]) -> None: ...

    async def get_user_playlists(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]: ...


class ConceptGateway(Protocol):
    async def generate_concept(self, profile: TasteProfile) -> PlaylistConcept: ...

    async def generate_concept_from_keywords(self, keywords: str, profile: TasteProfile) -> PlaylistConcept: ...


class PlaylistStore(Protocol):
    def save_playlist(self, record: PlaylistRecord) -> PlaylistRecord: ...

    def get_user_playlists(self, user_id: str) -> List[PlaylistRecord]: ...

    def delete_playlist(self, user_id: str, playlist_id: str) -> bool: ...
