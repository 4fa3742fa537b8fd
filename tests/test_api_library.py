import json

import pytest

from mediatree.core.config import settings


@pytest.fixture
def videos(sample_tree):
    (sample_tree / "movies" / "a.mp4").write_bytes(b"x")
    (sample_tree / "movies" / "b.mkv").write_bytes(b"y")
    return sample_tree


def _create(api, name, paths):
    return api.post(
        "/api/v1/library/playlists",
        json={"name": name, "videos": [{"path": p} for p in paths]},
    )


def test_playlist_lifecycle(api, videos):
    created = _create(api, "Weekend", ["movies/a.mp4", "clip.mp4"])
    assert created.status_code == 201
    playlist = created.json()
    assert playlist["name"] == "Weekend"
    assert [v["path"] for v in playlist["videos"]] == ["movies/a.mp4", "clip.mp4"]
    assert playlist["videos"][1]["size"] == 500000

    listed = api.get("/api/v1/library/playlists").json()
    assert [p["id"] for p in listed] == [playlist["id"]]

    renamed = api.put(f"/api/v1/library/playlists/{playlist['id']}", json={"name": "Sunday"})
    assert renamed.json()["name"] == "Sunday"
    assert renamed.json()["updated"] is not None
    assert len(renamed.json()["videos"]) == 2

    added = api.post(f"/api/v1/library/playlists/{playlist['id']}/videos", json={"path": "movies/b.mkv"})
    assert [v["path"] for v in added.json()["videos"]][-1] == "movies/b.mkv"

    removed = api.delete(
        f"/api/v1/library/playlists/{playlist['id']}/videos", params={"path": "movies/a.mp4"}
    )
    assert [v["path"] for v in removed.json()["videos"]] == ["clip.mp4", "movies/b.mkv"]

    deleted = api.delete(f"/api/v1/library/playlists/{playlist['id']}")
    assert deleted.json() == {"message": "Delete successful"}
    assert api.get(f"/api/v1/library/playlists/{playlist['id']}").status_code == 404


def test_playlists_persist_as_json(api, videos):
    _create(api, "Saved", ["clip.mp4"])
    stored = json.loads((settings.DATA_DIR / "playlists.json").read_text(encoding="utf-8"))
    assert stored["playlists"][0]["name"] == "Saved"
    assert stored["playlists"][0]["videos"][0]["path"] == "clip.mp4"


@pytest.mark.parametrize("name", ["", "   ", "a/b", "what?", "x" * 101])
def test_invalid_playlist_names(api, videos, name):
    response = _create(api, name, [])
    assert response.status_code == 400
    assert "error" in response.json()


def test_playlist_videos_must_be_sandboxed_existing_videos(api, videos):
    assert _create(api, "Escape", ["../secret.mp4"]).status_code == 403
    assert _create(api, "Missing", ["nope.mp4"]).status_code == 404
    assert _create(api, "Text", ["notes.txt"]).status_code == 400
    assert _create(api, "Dir", ["movies"]).status_code == 400
    assert api.get("/api/v1/library/playlists").json() == []


def test_reorder_playlists(api, videos):
    first = _create(api, "One", []).json()["id"]
    second = _create(api, "Two", []).json()["id"]
    third = _create(api, "Three", []).json()["id"]

    response = api.put("/api/v1/library/playlists", json={"ids": [third, first]})

    assert [p["id"] for p in response.json()] == [third, first, second]
    assert [p["name"] for p in api.get("/api/v1/library/playlists").json()] == ["Three", "One", "Two"]


def test_unknown_playlist(api, videos):
    assert api.get("/api/v1/library/playlists/missing").status_code == 404
    assert api.put("/api/v1/library/playlists/missing", json={"name": "x"}).status_code == 404
    assert api.delete("/api/v1/library/playlists/missing").status_code == 404


def test_favorites(api, videos):
    clip = api.post("/api/v1/library/favorites", json={"path": "clip.mp4"})
    assert clip.status_code == 201
    assert clip.json()["name"] == "clip.mp4"

    movies = api.post("/api/v1/library/favorites", json={"path": "movies", "name": "Films"}).json()
    assert movies["name"] == "Films"

    reordered = api.put("/api/v1/library/favorites", json={"ids": [movies["id"]]}).json()
    assert [f["path"] for f in reordered] == ["movies", "clip.mp4"]

    api.delete(f"/api/v1/library/favorites/{movies['id']}")
    assert [f["path"] for f in api.get("/api/v1/library/favorites").json()] == ["clip.mp4"]


def test_favorite_paths_are_sandboxed(api, videos):
    assert api.post("/api/v1/library/favorites", json={"path": "/etc"}).status_code == 403
    assert api.post("/api/v1/library/favorites", json={"path": "gone"}).status_code == 404


def test_corrupt_store_is_reported_as_unavailable(api, videos):
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    (settings.DATA_DIR / "favorites.json").write_text("{not json", encoding="utf-8")

    response = api.get("/api/v1/library/favorites")
    assert response.status_code == 503
    assert response.json() == {"error": "Failed to load favorites"}
