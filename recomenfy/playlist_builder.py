# recomenfy/playlist_builder.py
# ---------------------------------------------------------------------------
# Playlist assembly: listening history -> taste profile -> AI concept ->
# track selection -> (Spotify playlist + history record).
#
# auto_generate and custom_generate run the same pipeline with different
# candidate sources, discovery filtering and write-now/defer settings.
# ---------------------------------------------------------------------------
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, List, Optional, Set

from recomenfy import config
from recomenfy.concept import ConceptRequestBuilder
from recomenfy.datastore import new_playlist_record
from recomenfy.errors import PlaylistWriteError, RecomenfyError, UpstreamFetchError
from recomenfy.gateways import CatalogGateway, PlaylistStore
from recomenfy.profile_estimator import estimate_profile
from recomenfy.schemas import (
    ArtistSummary,
    CustomPlaylistResult,
    PlaylistConcept,
    TasteProfile,
    TimeRange,
    TrackCandidate,
)
from recomenfy.selection import SEARCH, TOP_TRACKS_FALLBACK, select_tracks

log = logging.getLogger("recomenfy.playlist")

TOP_TRACKS_LIMIT = 50
TOP_ARTISTS_LIMIT = 20
SEARCH_LIMIT = 50


@dataclass(frozen=True)
class PipelineOptions:
    top_tracks_range: TimeRange
    candidate_source: str           # SEARCH or TOP_TRACKS_FALLBACK
    write_now: bool
    top_artists_range: TimeRange = "medium_term"


AUTO = PipelineOptions(top_tracks_range="short_term", candidate_source=TOP_TRACKS_FALLBACK, write_now=True)
CUSTOM = PipelineOptions(top_tracks_range="medium_term", candidate_source=SEARCH, write_now=False)


@dataclass
class PipelineResult:
    profile: TasteProfile
    concept: PlaylistConcept
    tracks: List[TrackCandidate]
    playlist_url: Optional[str] = None


class PlaylistAssembler:
    def __init__(
        self,
        catalog: CatalogGateway,
        concepts: ConceptRequestBuilder,
        store: Optional[PlaylistStore] = None,
        track_limit: Optional[int] = None,
    ):
        self.catalog = catalog
        self.concepts = concepts
        self.store = store
        self.track_limit = track_limit if track_limit is not None else config.PLAYLIST_TRACK_LIMIT

    # ---------- public workflows ----------

    async def auto_generate(self, user_id: str) -> str:
        """Build and save a playlist from recent listening. Returns its Spotify URL."""
        result = await self._run(user_id, AUTO)
        return result.playlist_url or ""

    async def custom_generate(self, user_id: str, keywords: str, discovery_mode: bool = False) -> CustomPlaylistResult:
        """Propose tracks for a keyword theme. Nothing is written to Spotify."""
        keywords = (keywords or "").strip()
        if not keywords:
            raise ValueError("keywords must not be empty")
        result = await self._run(user_id, CUSTOM, keywords=keywords, discovery_mode=discovery_mode)
        log.info("[playlist] Returning %d tracks for approval", len(result.tracks))
        return CustomPlaylistResult(
            tracks=result.tracks,
            concept_name=result.concept.name,
            concept_description=result.concept.description,
        )

    async def create_from_approved_tracks(
        self,
        user_id: str,
        name: str,
        description: str,
        track_uris: List[str],
        keywords: Optional[str] = None,
    ) -> str:
        """Deferred write for custom_generate: create the playlist the user approved."""
        return await self._write_playlist(
            user_id, name, description or "", list(track_uris),
            playlist_type="custom", keywords=keywords or None,
        )

    async def get_music_profile(self, user_id: str) -> Dict[str, Any]:
        artists = await self._fetch(
            "top artists", self.catalog.get_top_artists(user_id, "medium_term", TOP_ARTISTS_LIMIT)
        )
        profile = estimate_profile(artists)
        return {
            **profile.model_dump(),
            "top_artists": [a.name for a in artists[:5]],
            "top_artists_full": [a.model_dump() for a in artists[:TOP_ARTISTS_LIMIT]],
        }

    # ---------- pipeline ----------

    async def _run(
        self,
        user_id: str,
        opts: PipelineOptions,
        keywords: Optional[str] = None,
        discovery_mode: bool = False,
    ) -> PipelineResult:
        log.info("[playlist] Step 1: Fetching user data...")
        top_tracks: List[TrackCandidate] = await self._fetch(
            "top tracks", self.catalog.get_top_tracks(user_id, opts.top_tracks_range, TOP_TRACKS_LIMIT)
        )
        top_artists: List[ArtistSummary] = await self._fetch(
            "top artists", self.catalog.get_top_artists(user_id, opts.top_artists_range, TOP_ARTISTS_LIMIT)
        )

        log.info("[playlist] Step 2: Analyzing profile...")
        profile = estimate_profile(top_artists)
        log.info(
            "[playlist] Profile: energy=%.2f valence=%.2f dance=%.2f mood=%s genres=%s",
            profile.energy_avg, profile.valence_avg, profile.danceability_avg,
            profile.mood_tendency, profile.top_genres,
        )

        log.info("[playlist] Step 3: Generating concept with AI...")
        concept = await self.concepts.request_concept(profile, keywords)

        log.info("[playlist] Step 4: Selecting tracks (source=%s)...", opts.candidate_source)
        if opts.candidate_source == SEARCH:
            candidates = await self._fetch(
                "search", self.catalog.search_tracks(user_id, (keywords or "").strip(), SEARCH_LIMIT)
            )
        else:
            candidates = top_tracks
        heard: Set[str] = {t.id for t in top_tracks}
        if discovery_mode:
            log.info("[playlist] Discovery mode: excluding %d already heard tracks", len(heard))
        tracks = select_tracks(candidates, heard, discovery_mode, self.track_limit)

        result = PipelineResult(profile=profile, concept=concept, tracks=tracks)
        if opts.write_now:
            log.info("[playlist] Step 5: Creating playlist...")
            result.playlist_url = await self._write_playlist(
                user_id, concept.name, concept.description,
                [t.uri for t in tracks if t.uri],
                playlist_type="auto",
            )
        return result

    async def _fetch(self, what: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except RecomenfyError:
            raise
        except Exception as e:
            log.error("[playlist] Fetching %s failed: %s", what, e)
            raise UpstreamFetchError(f"Failed to fetch {what}: {e}") from e

    async def _write_playlist(
        self,
        user_id: str,
        name: str,
        description: str,
        uris: List[str],
        playlist_type: str,
        keywords: Optional[str] = None,
    ) -> str:
        try:
            playlist = await self.catalog.create_playlist(user_id, name, description)
        except RecomenfyError:
            raise
        except Exception as e:
            log.error("[playlist] Creating playlist %r failed: %s", name, e)
            raise PlaylistWriteError(f"Failed to create playlist: {e}") from e

        if uris:
            try:
                await self.catalog.add_tracks_to_playlist(user_id, playlist.id, uris)
            except Exception as e:
                # no rollback: the playlist stays on Spotify, empty
                log.error("[playlist] Playlist %s created but adding tracks failed: %s", playlist.id, e)
                raise PlaylistWriteError(f"Failed to add tracks: {e}", playlist_id=playlist.id) from e
        else:
            log.warning("[playlist] No tracks selected; playlist %s left empty", playlist.id)

        if self.store is not None:
            self.store.save_playlist(new_playlist_record(
                user_id=user_id,
                spotify_playlist_id=playlist.id,
                name=name,
                description=description,
                playlist_url=playlist.external_url,
                type=playlist_type,
                keywords=keywords,
                track_count=len(uris),
            ))
        log.info("[playlist] Playlist ready: %s (%d tracks)", playlist.external_url, len(uris))
        return playlist.external_url
