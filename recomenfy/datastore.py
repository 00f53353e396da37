# recomenfy/datastore.py
# Local JSON store at <data dir>/recomenfy.json with four tables:
# users, spotify_tokens, playlists, oauth_states.
# A corrupted file is backed up to .bak and reset.

from __future__ import annotations
import json
import logging
import threading
import time
import uuid
import datetime as dt
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from recomenfy import config
from recomenfy.schemas import PlaylistRecord, TokenRecord, UserRecord

log = logging.getLogger("recomenfy.datastore")

_TABLES = ("users", "spotify_tokens", "playlists", "oauth_states")

STATE_TTL_SECS = 600


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


def _empty() -> Dict[str, Any]:
    return {"users": {}, "spotify_tokens": {}, "playlists": [], "oauth_states": {}}


def _normalize(raw: Any) -> Dict[str, Any]:
    """Coerce whatever is on disk into the four-table shape."""
    db = _empty()
    if not isinstance(raw, dict):
        return db
    for name in _TABLES:
        value = raw.get(name)
        if isinstance(value, type(db[name])):
            db[name] = value
    db["playlists"] = [p for p in db["playlists"] if _valid_playlist(p)]
    return db


def _valid_playlist(p: Any) -> bool:
    if not isinstance(p, dict):
        return False
    try:
        PlaylistRecord(**p)
    except ValidationError:
        log.warning("[store] Dropping unreadable playlist row: %s", p.get("id", "?"))
        return False
    return True


class DataStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else config.DATA_DIR / "recomenfy.json"
        self._lock = threading.RLock()

    # ---------- file I/O ----------

    def _ensure_file(self) -> None:
        with self._lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._write_all(_empty())

    def _read_all(self) -> Dict[str, Any]:
        with self._lock:
            self._ensure_file()
            try:
                raw = json.loads(self.path.read_bytes().decode("utf-8") or "{}")
            except (json.JSONDecodeError, UnicodeDecodeError):
                log.warning("[store] Corrupted store at %s; backing up and resetting.", self.path)
                self.path.replace(self.path.with_suffix(".bak"))
                db = _empty()
                self._write_all(db)
                return db
            return _normalize(raw)

    def _write_all(self, db: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(db, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    # ---------- users ----------

    def upsert_user(self, spotify_user: Dict[str, Any]) -> UserRecord:
        """Create or update the user keyed on the Spotify account id."""
        spotify_id = spotify_user.get("id")
        if not spotify_id:
            raise ValueError("Spotify profile has no id")
        images = spotify_user.get("images") or []
        now = _now_iso()
        with self._lock:
            db = self._read_all()
            existing = next(
                (u for u in db["users"].values() if u.get("spotify_id") == spotify_id), None
            )
            rec = dict(existing or {"id": str(uuid.uuid4()), "created_at": now})
            rec.update({
                "spotify_id": spotify_id,
                "email": spotify_user.get("email"),
                "display_name": spotify_user.get("display_name"),
                "profile_image": (images[0] or {}).get("url") if images else None,
                "updated_at": now,
            })
            db["users"][rec["id"]] = rec
            self._write_all(db)
        return UserRecord(**rec)

    def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        rec = self._read_all()["users"].get(user_id)
        return UserRecord(**rec) if rec else None

    def get_user_by_spotify_id(self, spotify_id: str) -> Optional[UserRecord]:
        for rec in self._read_all()["users"].values():
            if rec.get("spotify_id") == spotify_id:
                return UserRecord(**rec)
        return None

    # ---------- tokens ----------

    def save_spotify_tokens(self, user_id: str, access_token: str, refresh_token: Optional[str], expires_in: int) -> TokenRecord:
        rec = TokenRecord(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=int(time.time()) + int(expires_in),
            updated_at=_now_iso(),
        )
        with self._lock:
            db = self._read_all()
            db["spotify_tokens"][user_id] = rec.model_dump()
            self._write_all(db)
        return rec

    def get_spotify_tokens(self, user_id: str) -> Optional[TokenRecord]:
        rec = self._read_all()["spotify_tokens"].get(user_id)
        return TokenRecord(**rec) if rec else None

    # ---------- playlists ----------

    def save_playlist(self, record: PlaylistRecord) -> PlaylistRecord:
        with self._lock:
            db = self._read_all()
            db["playlists"].append(record.model_dump())
            self._write_all(db)
        return record

    def get_user_playlists(self, user_id: str) -> List[PlaylistRecord]:
        """Newest first."""
        items = [p for p in self._read_all()["playlists"] if p.get("user_id") == user_id]
        items.sort(key=lambda p: p.get("created_at") or "", reverse=True)
        return [PlaylistRecord(**p) for p in items]

    def delete_playlist(self, user_id: str, playlist_id: str) -> bool:
        with self._lock:
            db = self._read_all()
            keep = [
                p for p in db["playlists"]
                if not (p.get("id") == playlist_id and p.get("user_id") == user_id)
            ]
            if len(keep) == len(db["playlists"]):
                return False
            db["playlists"] = keep
            self._write_all(db)
        return True

    # ---------- oauth state ----------

    def add_state(self, state: str) -> None:
        with self._lock:
            db = self._read_all()
            db["oauth_states"][state] = {"created_at": int(time.time())}
            self._write_all(db)

    def pop_state(self, state: str) -> bool:
        """Consume a state; True only if it existed and has not expired."""
        with self._lock:
            db = self._read_all()
            entry = db["oauth_states"].pop(state, None)
            if entry is None:
                return False
            self._write_all(db)
        return (int(time.time()) - int(entry.get("created_at", 0))) <= STATE_TTL_SECS


def new_playlist_record(**fields: Any) -> PlaylistRecord:
    return PlaylistRecord(id=str(uuid.uuid4()), created_at=_now_iso(), **fields)
