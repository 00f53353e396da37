# recomenfy/profile_estimator.py
# ---------------------------------------------------------------------------
# Genre-keyword heuristic: top artists -> TasteProfile.
# No audio features are involved; every genre tag is mapped through an ordered
# keyword table to an (energy, valence, danceability) triple and averaged.
# ---------------------------------------------------------------------------
from __future__ import annotations
import collections
from typing import Any, Iterable, List, Sequence, Tuple

from recomenfy.schemas import TasteProfile

Triple = Tuple[float, float, float]

NEUTRAL: Triple = (0.5, 0.5, 0.5)

# Scanned top to bottom, first substring hit wins ("indie pop" -> pop,
# "trap" -> rap, "k-pop" -> pop). Keep the order stable.
GENRE_KEYWORDS: List[Tuple[str, Triple]] = [
    ("pop",        (0.8,  0.8, 0.8)),
    ("rock",       (0.8,  0.5, 0.5)),
    ("hip hop",    (0.7,  0.6, 0.8)),
    ("rap",        (0.7,  0.5, 0.8)),
    ("indie",      (0.6,  0.6, 0.6)),
    ("jazz",       (0.4,  0.6, 0.5)),
    ("classical",  (0.2,  0.5, 0.1)),
    ("metal",      (0.95, 0.3, 0.3)),
    ("dance",      (0.9,  0.8, 0.9)),
    ("electronic", (0.8,  0.7, 0.8)),
    ("latin",      (0.8,  0.9, 0.9)),
    ("folk",       (0.3,  0.5, 0.4)),
    ("r&b",        (0.5,  0.6, 0.7)),
]

TOP_GENRES = 5


def _genres_of(artist: Any) -> List[str]:
    if isinstance(artist, dict):
        raw = artist.get("genres")
    else:
        raw = getattr(artist, "genres", None)
    return [g for g in (raw or []) if isinstance(g, str)]


def _id_of(artist: Any) -> str:
    if isinstance(artist, dict):
        return str(artist.get("id") or "")
    return str(getattr(artist, "id", "") or "")


def extract_top_genres(artists: Iterable[Any], n: int = TOP_GENRES) -> List[str]:
    """Most frequent tags first; ties keep first-seen order."""
    counts: collections.Counter = collections.Counter()
    for a in artists:
        for g in _genres_of(a):
            counts[g] += 1
    return [g for g, _ in counts.most_common(n)]


def lookup_genre(tag: str) -> Triple:
    lower = tag.lower()
    for keyword, triple in GENRE_KEYWORDS:
        if keyword in lower:
            return triple
    return NEUTRAL


def estimate_features(tags: Sequence[str]) -> Triple:
    if not tags:
        return NEUTRAL
    e_sum = v_sum = d_sum = 0.0
    for tag in tags:
        e, v, d = lookup_genre(tag)
        e_sum += e
        v_sum += v
        d_sum += d
    n = len(tags)
    return round(e_sum / n, 2), round(v_sum / n, 2), round(d_sum / n, 2)


def mood_from_features(energy: float, valence: float) -> str:
    if energy > 0.7 and valence > 0.6:
        return "excited/extroverted"
    if energy > 0.7 and valence < 0.4:
        return "intense/aggressive"
    if energy < 0.4 and valence > 0.6:
        return "relaxed/peaceful"
    if energy < 0.4 and valence < 0.4:
        return "melancholic/sad"
    if energy > 0.5:
        return "energetic"
    return "chill"


def estimate_profile(artists: Sequence[Any]) -> TasteProfile:
    """Build a TasteProfile from artists carrying genre tags.

    Accepts ArtistSummary models or plain dicts with a ``genres`` list.
    Every tag counts, duplicates included.
    """
    artists = list(artists or [])
    tags = [g for a in artists for g in _genres_of(a)]
    energy, valence, dance = estimate_features(tags)
    return TasteProfile(
        energy_avg=energy,
        valence_avg=valence,
        danceability_avg=dance,
        top_genres=extract_top_genres(artists),
        top_artist_ids=[aid for aid in (_id_of(a) for a in artists) if aid],
        mood_tendency=mood_from_features(energy, valence),
        # fixed policy until listening novelty is measured
        discovery_tolerance="medium",
    )
