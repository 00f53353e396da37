# recomenfy/main.py
"""
Recomenfy API.

Run with: uvicorn recomenfy.main:app --port 8000 --reload
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recomenfy import config
from recomenfy.routes.auth_routes import router as auth_router
from recomenfy.routes.playlist_routes import router as playlist_router
from recomenfy.routes.user_routes import router as user_router

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("recomenfy")

if not config.SPOTIFY_CLIENT_ID:
    log.warning("SPOTIFY_CLIENT_ID is not set in .env")

# ----------------------------------
# App
# ----------------------------------
app = FastAPI(
    title="Recomenfy API",
    version="1.0.0",
    description="Taste profile + AI playlist concepts + Spotify playlist assembly.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(playlist_router)


@app.get("/")
def root():
    return {"service": "recomenfy", "status": "ok"}


@app.get("/health")
def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("recomenfy.main:app", host="127.0.0.1", port=8000, reload=True)
