# recomenfy/deps.py
# FastAPI dependencies. Tests swap these through app.dependency_overrides.
from __future__ import annotations
from functools import lru_cache
from typing import Any, Dict

from fastapi import Depends, Header, HTTPException

from recomenfy.auth import SpotifyTokenProvider, TokenError, verify_token
from recomenfy.concept import ConceptRequestBuilder
from recomenfy.datastore import DataStore
from recomenfy.errors import NotAuthenticatedError, RecomenfyError
from recomenfy.llm_helper import get_concept_gateway
from recomenfy.playlist_builder import PlaylistAssembler
from recomenfy.spotify import SpotifyClient


@lru_cache(maxsize=1)
def get_store() -> DataStore:
    return DataStore()


def get_catalog(store: DataStore = Depends(get_store)) -> SpotifyClient:
    return SpotifyClient(SpotifyTokenProvider(store))


@lru_cache(maxsize=1)
def get_concept_builder() -> ConceptRequestBuilder:
    return ConceptRequestBuilder(get_concept_gateway())


def get_assembler(
    catalog: SpotifyClient = Depends(get_catalog),
    concepts: ConceptRequestBuilder = Depends(get_concept_builder),
    store: DataStore = Depends(get_store),
) -> PlaylistAssembler:
    return PlaylistAssembler(catalog, concepts, store)


def current_user(authorization: str = Header(default="")) -> Dict[str, Any]:
    """Claims of the app JWT from `Authorization: Bearer <token>`."""
    if not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="No token provided")
    token = authorization.split(" ", 1)[1].strip()
    try:
        return verify_token(token)
    except TokenError as e:
        raise HTTPException(status_code=401, detail=str(e))


def http_error(e: RecomenfyError) -> HTTPException:
    if isinstance(e, NotAuthenticatedError):
        return HTTPException(status_code=401, detail=e.user_message)
    return HTTPException(status_code=502, detail=e.user_message)
