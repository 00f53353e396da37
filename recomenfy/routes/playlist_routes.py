# recomenfy/routes/playlist_routes.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from recomenfy.datastore import DataStore
from recomenfy.deps import current_user, get_assembler, get_store, http_error
from recomenfy.errors import RecomenfyError
from recomenfy.playlist_builder import PlaylistAssembler
from recomenfy.schemas import CreateFromTracksRequest, CustomPlaylistRequest

router = APIRouter(prefix="/playlist", tags=["playlist"])


@router.post("/generate")
async def generate(
    claims: Dict[str, Any] = Depends(current_user),
    assembler: PlaylistAssembler = Depends(get_assembler),
):
    try:
        url = await assembler.auto_generate(claims["id"])
    except RecomenfyError as e:
        raise http_error(e)
    return {"success": True, "playlistUrl": url}


@router.post("/custom")
async def generate_custom(
    body: CustomPlaylistRequest,
    claims: Dict[str, Any] = Depends(current_user),
    assembler: PlaylistAssembler = Depends(get_assembler),
):
    keywords = body.keywords.strip()
    if not keywords:
        raise HTTPException(status_code=400, detail="Keywords are required")
    try:
        result = await assembler.custom_generate(claims["id"], keywords, body.discovery_mode)
    except RecomenfyError as e:
        raise http_error(e)
    return {
        "success": True,
        "tracks": [t.model_dump(by_alias=True) for t in result.tracks],
        "playlistConcept": {
            "name": result.concept_name,
            "description": result.concept_description,
        },
    }


@router.post("/create-from-tracks")
async def create_from_tracks(
    body: CreateFromTracksRequest,
    claims: Dict[str, Any] = Depends(current_user),
    assembler: PlaylistAssembler = Depends(get_assembler),
):
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Name and trackUris are required")
    try:
        url = await assembler.create_from_approved_tracks(
            claims["id"], body.name.strip(), body.description, body.track_uris, body.keywords,
        )
    except RecomenfyError as e:
        raise http_error(e)
    return {"success": True, "playlistUrl": url}


@router.get("/history")
def get_history(claims: Dict[str, Any] = Depends(current_user), store: DataStore = Depends(get_store)):
    playlists = store.get_user_playlists(claims["id"])
    return {"success": True, "playlists": [p.model_dump() for p in playlists]}


@router.delete("/history/{playlist_id}")
def delete_history_item(
    playlist_id: str,
    claims: Dict[str, Any] = Depends(current_user),
    store: DataStore = Depends(get_store),
):
    if not store.delete_playlist(claims["id"], playlist_id):
        raise HTTPException(status_code=404, detail="Playlist not found")
    return {"success": True}
