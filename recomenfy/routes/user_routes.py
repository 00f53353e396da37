# recomenfy/routes/user_routes.py
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, HTTPException

from recomenfy.deps import current_user, get_assembler, get_catalog, http_error
from recomenfy.errors import RecomenfyError
from recomenfy.playlist_builder import PlaylistAssembler
from recomenfy.spotify import SpotifyClient

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile")
async def get_profile(
    claims: Dict[str, Any] = Depends(current_user),
    assembler: PlaylistAssembler = Depends(get_assembler),
):
    try:
        profile = await assembler.get_music_profile(claims["id"])
    except RecomenfyError as e:
        raise http_error(e)
    return {"success": True, "profile": profile}


@router.get("/playlists")
async def get_user_playlists(
    claims: Dict[str, Any] = Depends(current_user),
    catalog: SpotifyClient = Depends(get_catalog),
):
    try:
        playlists = await catalog.get_user_playlists(claims["id"])
    except RecomenfyError as e:
        raise http_error(e)
    except httpx.HTTPStatusError as e:
        raise HTTPException(status_code=e.response.status_code, detail=e.response.text)
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"Spotify request failed: {e}")
    return {"success": True, "playlists": playlists}
