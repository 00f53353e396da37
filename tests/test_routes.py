import pytest
from conftest import FakeCatalog, FakeConceptGateway, make_artists, make_concept, make_tracks
from fastapi.testclient import TestClient

from recomenfy.auth import generate_token
from recomenfy.concept import ConceptRequestBuilder
from recomenfy.datastore import DataStore, new_playlist_record
from recomenfy.deps import get_assembler, get_catalog, get_store
from recomenfy.main import app
from recomenfy.playlist_builder import PlaylistAssembler


@pytest.fixture
def env(tmp_path, jwt_secret):
    store = DataStore(tmp_path / "db.json")
    user = store.upsert_user({"id": "spot1", "email": "a@x.io", "display_name": "A"})
    catalog = FakeCatalog(
        top_tracks=make_tracks(50),
        top_artists=make_artists(10, ["rock"]),
        search_results=make_tracks(40, prefix="s"),
    )
    gateway = FakeConceptGateway(make_concept("Open Road", description="Miles of it."))
    assembler = PlaylistAssembler(catalog, ConceptRequestBuilder(gateway), store)

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_assembler] = lambda: assembler
    client = TestClient(app)
    client.headers["Authorization"] = f"Bearer {generate_token(user)}"
    yield client, store, catalog, user
    app.dependency_overrides.clear()


def test_health():
    assert TestClient(app).get("/health").json() == {"ok": True}


def test_requests_without_token_are_rejected(env):
    client, *_ = env
    res = client.post("/playlist/generate", headers={"Authorization": ""})
    assert res.status_code == 401
    assert res.json()["detail"] == "No token provided"

    res = client.post("/playlist/generate", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid token"


def test_me_returns_stored_user(env):
    client, _, _, user = env
    body = client.get("/auth/me").json()
    assert body["user"]["id"] == user.id
    assert body["user"]["spotify_id"] == "spot1"


def test_login_redirects_to_spotify(env, spotify_creds):
    client, *_ = env
    res = client.get("/auth/login", follow_redirects=False)
    assert res.status_code in (302, 307)
    assert res.headers["location"].startswith("https://accounts.spotify.com/authorize?")


def test_callback_validates_code_and_state(env):
    client, *_ = env
    assert client.get("/auth/callback").status_code == 400
    res = client.get("/auth/callback", params={"code": "c", "state": "never-issued"})
    assert res.status_code == 400


def test_generate_returns_playlist_url(env):
    client, store, catalog, user = env
    res = client.post("/playlist/generate")
    assert res.status_code == 200
    assert res.json() == {"success": True, "playlistUrl": "https://open.spotify.com/playlist/pl1"}
    assert store.get_user_playlists(user.id)[0].type == "auto"


def test_generate_upstream_failure_is_bad_gateway(env):
    client, _, catalog, _ = env
    catalog.fail.add("get_top_tracks")
    res = client.post("/playlist/generate")
    assert res.status_code == 502
    assert catalog.write_calls == []


def test_custom_requires_keywords(env):
    client, *_ = env
    res = client.post("/playlist/custom", json={"keywords": "   "})
    assert res.status_code == 400
    assert res.json()["detail"] == "Keywords are required"


def test_custom_returns_preview_tracks(env):
    client, _, catalog, _ = env
    res = client.post("/playlist/custom", json={"keywords": "road trip", "discoveryMode": False})
    body = res.json()
    assert res.status_code == 200
    assert len(body["tracks"]) == 30
    assert body["tracks"][0]["albumArt"] == ""
    assert body["playlistConcept"] == {"name": "Open Road", "description": "Miles of it."}
    assert catalog.write_calls == []


def test_create_from_tracks_and_history(env):
    client, store, _, user = env
    res = client.post("/playlist/create-from-tracks", json={
        "name": "Picked", "description": "", "trackUris": ["spotify:track:x"], "keywords": "rain",
    })
    assert res.json()["playlistUrl"].endswith("/pl1")

    history = client.get("/playlist/history").json()["playlists"]
    assert [(p["name"], p["type"]) for p in history] == [("Picked", "custom")]

    assert client.delete(f"/playlist/history/{history[0]['id']}").json() == {"success": True}
    assert client.delete(f"/playlist/history/{history[0]['id']}").status_code == 404
    assert store.get_user_playlists(user.id) == []


def test_create_from_tracks_requires_name(env):
    client, *_ = env
    res = client.post("/playlist/create-from-tracks", json={"name": " ", "trackUris": []})
    assert res.status_code == 400


def test_history_is_scoped_to_caller(env):
    client, store, _, _ = env
    store.save_playlist(new_playlist_record(
        user_id="someone-else", spotify_playlist_id="x", name="Theirs",
        playlist_url="https://open.spotify.com/playlist/x", type="auto", track_count=1,
    ))
    assert client.get("/playlist/history").json()["playlists"] == []


def test_user_profile_and_playlists(env):
    client, *_ = env
    profile = client.get("/user/profile").json()["profile"]
    assert profile["top_genres"] == ["rock"]
    assert profile["mood_tendency"] == "energetic"
    assert len(profile["top_artists"]) == 5

    assert client.get("/user/playlists").json()["playlists"] == [{"id": "sp1", "name": "Mine"}]
