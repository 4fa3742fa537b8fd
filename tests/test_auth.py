import pytest
from jose import jwt

from mediatree.core import security
from mediatree.core.config import settings


@pytest.fixture
def locked(api, sample_tree, monkeypatch):
    monkeypatch.setattr(settings, "ACCESS_PASSWORD", "open-sesame")
    return api


def _login(api, password):
    return api.post("/api/v1/auth/token", data={"username": "anyone", "password": password})


def test_open_when_no_password_is_configured(api, sample_tree):
    assert api.get("/api/v1/files/browse").status_code == 200
    assert _login(api, "whatever").status_code == 200


def test_requests_without_a_token_are_rejected(locked):
    response = locked.get("/api/v1/files/browse")
    assert response.status_code == 401
    assert response.json() == {"error": "Could not validate credentials"}
    assert response.headers["www-authenticate"] == "Bearer"

    assert locked.get("/videos/clip.mp4").status_code == 401
    assert locked.get("/api/v1/library/playlists").status_code == 401


def test_config_stays_public(locked):
    response = locked.get("/api/v1/config")
    assert response.status_code == 200
    assert response.json()["authRequired"] is True


def test_wrong_password(locked):
    response = _login(locked, "nope")
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect password"}


def test_bearer_token_and_query_token(locked):
    token = _login(locked, "open-sesame").json()
    assert token["token_type"] == "bearer"
    access = token["access_token"]

    headers = {"Authorization": f"Bearer {access}"}
    assert locked.get("/api/v1/files/browse", headers=headers).status_code == 200

    # <video src> cannot send headers
    streamed = locked.get("/videos/clip.mp4", params={"token": access})
    assert streamed.status_code == 200


def test_forged_tokens_are_rejected(locked):
    forged = jwt.encode({"sub": security.SUBJECT}, "another-key", algorithm=security.ALGORITHM)
    other_subject = jwt.encode({"sub": "admin"}, settings.SECRET_KEY, algorithm=security.ALGORITHM)

    for token in (forged, other_subject, "garbage"):
        response = locked.get("/api/v1/files/browse", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
