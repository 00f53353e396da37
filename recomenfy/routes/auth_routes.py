# recomenfy/routes/auth_routes.py
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from recomenfy import config
from recomenfy.auth import complete_login, create_login_redirect_url, new_state
from recomenfy.datastore import DataStore
from recomenfy.deps import current_user, get_store

log = logging.getLogger("recomenfy.routes.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/login")
def spotify_login(store: DataStore = Depends(get_store)):
    state = new_state(store)
    return RedirectResponse(create_login_redirect_url(state))


@router.get("/callback")
async def spotify_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    store: DataStore = Depends(get_store),
):
    if not code:
        raise HTTPException(status_code=400, detail="Code is required")
    if not state or not store.pop_state(state):
        raise HTTPException(status_code=400, detail="Invalid or expired state")

    try:
        user, token = await complete_login(code, store)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        log.error("[auth] Login failed: %s", e)
        return RedirectResponse(f"{config.FRONTEND_URL}/auth/callback?error=auth_failed")

    user_payload = quote(json.dumps(user.model_dump()), safe="")
    return RedirectResponse(f"{config.FRONTEND_URL}/auth/callback?token={token}&user={user_payload}")


@router.get("/me")
def me(claims: Dict[str, Any] = Depends(current_user), store: DataStore = Depends(get_store)):
    user = store.get_user_by_id(claims["id"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": user.model_dump()}
