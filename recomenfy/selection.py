# recomenfy/selection.py
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Sequence

from recomenfy.schemas import TrackCandidate

DEFAULT_LIMIT = 30

# Candidate sources for the playlist pipeline.
SEARCH = "search"
# Seed-based /recommendations is unreliable, so auto-generate draws from the
# user's own recent top tracks instead.
TOP_TRACKS_FALLBACK = "top_tracks_fallback"


def track_from_spotify(item: Dict[str, Any]) -> Optional[TrackCandidate]:
    """Flatten a Spotify track object. Returns None for null/local items without an id."""
    if not item or not isinstance(item, dict) or not item.get("id"):
        return None
    artists = item.get("artists") or [{}]
    album = item.get("album") or {}
    images = album.get("images") or [{}]
    return TrackCandidate(
        id=item["id"],
        name=item.get("name") or "",
        artist=(artists[0] or {}).get("name") or "Unknown Artist",
        album=album.get("name") or "Unknown Album",
        album_art=(images[0] or {}).get("url") or "",
        uri=item.get("uri") or "",
    )


def select_tracks(
    candidates: Sequence[TrackCandidate],
    already_heard: Optional[Iterable[str]] = None,
    discovery_mode: bool = False,
    limit: int = DEFAULT_LIMIT,
) -> List[TrackCandidate]:
    """Filter and cap a candidate pool, keeping the source order.

    With ``discovery_mode`` every candidate whose id is in ``already_heard`` is
    dropped. The result never exceeds ``limit``; an empty pool gives [].
    """
    if limit <= 0:
        return []
    pool = list(candidates or [])
    if discovery_mode:
        heard = set(already_heard or ())
        pool = [t for t in pool if t.id not in heard]
    return pool[:limit]
