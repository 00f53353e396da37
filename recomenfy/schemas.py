from __future__ import annotations
from typing import Literal, Optional, List, Tuple
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

MoodTendency = Literal[
    "excited/extroverted", "intense/aggressive", "relaxed/peaceful",
    "melancholic/sad", "energetic", "chill",
]
DiscoveryTolerance = Literal["low", "medium", "high"]
PlaylistType = Literal["auto", "custom"]
TimeRange = Literal["short_term", "medium_term", "long_term"]


# ---------- domain ----------

class ArtistSummary(BaseModel):
    id: str
    name: str = ""
    genres: List[str] = []
    images: List[dict] = []
    popularity: Optional[int] = None
    followers: Optional[int] = None
    external_url: str = ""


class TrackCandidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = ""
    artist: str = "Unknown Artist"
    album: str = "Unknown Album"
    album_art: str = Field(default="", alias="albumArt")
    uri: str = ""


class TasteProfile(BaseModel):
    energy_avg: float = Field(default=0.5, ge=0.0, le=1.0)
    valence_avg: float = Field(default=0.5, ge=0.0, le=1.0)
    danceability_avg: float = Field(default=0.5, ge=0.0, le=1.0)
    top_genres: List[str] = Field(default_factory=list, max_length=5)
    top_artist_ids: List[str] = []
    mood_tendency: MoodTendency = "chill"
    discovery_tolerance: DiscoveryTolerance = "medium"


class PlaylistConcept(BaseModel):
    """Concept returned by the generative provider.

    Accepts the wire keys the prompt asks for (``playlist_name``,
    ``target_energy`` ...) as well as the attribute names.
    """

    name: str = Field(validation_alias=AliasChoices("playlist_name", "name"))
    description: str = ""
    target_energy_range: Tuple[float, float] = Field(
        validation_alias=AliasChoices("target_energy", "target_energy_range", "targetEnergyRange")
    )
    target_valence_range: Tuple[float, float] = Field(
        validation_alias=AliasChoices("target_valence", "target_valence_range", "targetValenceRange")
    )
    preferred_genres: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("preferred_genres", "preferredGenres")
    )
    novelty: float = Field(default=0.0, ge=0.0, le=1.0)
    avoid_artist_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("avoid_artists", "avoid_artist_ids", "avoidArtistIds"),
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _description_text(cls, v):
        return (v or "").strip() if isinstance(v, str) or v is None else v

    @field_validator("preferred_genres", "avoid_artist_ids", "novelty", mode="before")
    @classmethod
    def _null_is_default(cls, v, info):
        # providers send null for "nothing to say"
        if v is None:
            return 0.0 if info.field_name == "novelty" else []
        return v

    @field_validator("target_energy_range", "target_valence_range")
    @classmethod
    def _unit_range(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        lo, hi = v
        if not (0.0 <= lo <= hi <= 1.0):
            raise ValueError(f"range {list(v)} must satisfy 0 <= low <= high <= 1")
        return v


class CreatedPlaylist(BaseModel):
    id: str
    external_url: str


class CustomPlaylistResult(BaseModel):
    tracks: List[TrackCandidate]
    concept_name: str
    concept_description: str = ""


# ---------- persistence ----------

class UserRecord(BaseModel):
    id: str
    spotify_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: str
    updated_at: str


class TokenRecord(BaseModel):
    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: int  # epoch seconds
    updated_at: str


class PlaylistRecord(BaseModel):
    id: str
    user_id: str
    spotify_playlist_id: str
    name: str
    description: str = ""
    playlist_url: str
    type: PlaylistType
    keywords: Optional[str] = None
    track_count: int = 0
    created_at: str


# ---------- HTTP payloads ----------

class CustomPlaylistRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    keywords: str = ""
    discovery_mode: bool = Field(default=False, alias="discoveryMode")


class CreateFromTracksRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    track_uris: List[str] = Field(alias="trackUris")
    keywords: Optional[str] = None
