from base64 import b64encode
import json
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from itsdangerous import TimestampSigner

from app.api.dependencies import get_auth_manager
from app.api.fastapi_app import create_app
from app.config import SESSION_TOKEN_KEY, SPOTIFY_AUTH_URL
from app.core import TokenInfo
from app.spotify import AuthSessionManager, SessionError, SpotifyApiError
from tests.support.fakes import (
    FakeMusicLibrary,
    artist_payload,
    artist_ref,
    features_payload,
    page_payload,
    saved_track_payload,
)


class FakeExchange:
    def __init__(self, result: Optional[TokenInfo]):
        self.result = result
        self.codes: List[str] = []

    def __call__(self, code: str) -> Optional[TokenInfo]:
        self.codes.append(code)
        return self.result


@pytest.fixture
def exchange() -> FakeExchange:
    return FakeExchange(TokenInfo(access_token="user-token", scope="user-library-read"))


@pytest.fixture
def client(exchange: FakeExchange) -> TestClient:
    app = create_app(secret_key="test-secret", public_dir=None)
    app.dependency_overrides[get_auth_manager] = lambda: AuthSessionManager(
        exchange=exchange
    )
    return TestClient(app)


@pytest.fixture
def library(monkeypatch) -> FakeMusicLibrary:
    fake = FakeMusicLibrary(
        page_payload(
            [
                saved_track_payload("A", artists=[artist_ref("art1")]),
                saved_track_payload(None, artists=[artist_ref("art1")]),
            ],
            total=57,
        ),
        artists=[artist_payload("art1", ["rock", "pop"])],
        features=[features_payload("A")],
    )
    tokens: List[str] = []

    def build_library(token_info: TokenInfo) -> FakeMusicLibrary:
        tokens.append(token_info.access_token)
        return fake

    fake.tokens = tokens
    monkeypatch.setattr("app.api.dependencies.SpotifyMusicLibrary", build_library)
    return fake


def _start_auth(client: TestClient) -> str:
    response = client.get("/auth", follow_redirects=False)
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(SPOTIFY_AUTH_URL)
    return parse_qs(urlparse(location).query)["state"][0]


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_auth_redirects_to_spotify_with_scopes(client: TestClient) -> None:
    response = client.get("/auth", follow_redirects=False)

    assert response.status_code == 302
    query = parse_qs(urlparse(response.headers["location"]).query)
    assert query["scope"] == ["user-library-read playlist-modify-private"]
    assert query["state"][0]


def test_callback_with_error_fails_to_authorize(
    client: TestClient, exchange: FakeExchange
) -> None:
    state = _start_auth(client)

    response = client.get(
        "/spotify", params={"state": state, "error": "access_denied"}
    )

    assert response.status_code == 200
    assert response.text == "Failed to authorize."
    assert response.headers["content-type"].startswith("text/plain")
    assert exchange.codes == []


def test_callback_without_code_is_bad_code(client: TestClient) -> None:
    state = _start_auth(client)

    response = client.get("/spotify", params={"state": state})

    assert response.status_code == 200
    assert response.text == "Bad authorization code."


def test_callback_with_foreign_state_is_rejected(
    client: TestClient, exchange: FakeExchange
) -> None:
    _start_auth(client)

    response = client.get("/spotify", params={"state": "forged", "code": "xyz"})

    assert response.text == "Failed to authorize."
    assert exchange.codes == []


def test_bad_code_does_not_log_in(
    client: TestClient, exchange: FakeExchange, library: FakeMusicLibrary
) -> None:
    exchange.result = None
    state = _start_auth(client)

    response = client.get("/spotify", params={"state": state, "code": "xyz"})

    assert response.status_code == 200
    assert response.text == "Bad authorization code."
    assert exchange.codes == ["xyz"]
    assert client.get("/analysis").status_code == 401


def test_analysis_without_session_token_is_401(client: TestClient) -> None:
    response = client.get("/analysis")

    assert response.status_code == 401
    assert response.text == "Not logged in."


def test_login_then_analysis(
    client: TestClient, exchange: FakeExchange, library: FakeMusicLibrary
) -> None:
    state = _start_auth(client)

    callback = client.get(
        "/spotify",
        params={"state": state, "code": "good-code"},
        follow_redirects=False,
    )
    assert callback.status_code == 302
    assert callback.headers["location"] == "/"

    response = client.get("/analysis")

    assert response.status_code == 200
    body: Dict = response.json()
    assert body["limit"] == 10
    assert body["offset"] == 0
    assert body["total"] == 57
    assert len(body["tracks"]) == 1
    track = body["tracks"][0]
    assert track["saved_track"]["track"]["id"] == "A"
    assert track["genres"] == ["rock", "pop"]
    assert track["audio_features"]["id"] == "A"
    assert library.tokens == ["user-token"]
    assert library.called("get_saved_tracks") == [("get_saved_tracks", 10, 0)]


def test_spotify_failure_during_analysis_is_502(
    client: TestClient, monkeypatch
) -> None:
    failing = FakeMusicLibrary(
        page_payload([], total=0),
        fail_on="get_saved_tracks",
        error=SpotifyApiError("token expired", status_code=401),
    )
    monkeypatch.setattr(
        "app.api.dependencies.SpotifyMusicLibrary", lambda token_info: failing
    )
    state = _start_auth(client)
    client.get("/spotify", params={"state": state, "code": "good-code"})

    response = client.get("/analysis")

    assert response.status_code == 502
    assert response.json()["upstream_status"] == 401


def test_static_index_is_served(tmp_path) -> None:
    (tmp_path / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    app = create_app(secret_key="test-secret", public_dir=str(tmp_path))

    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert "home" in response.text


class BrokenStoreManager(AuthSessionManager):
    def store_token(self, session, token_info: TokenInfo) -> None:
        raise SessionError("cookie too large")


def test_callback_session_write_failure_is_internal_error(
    exchange: FakeExchange,
) -> None:
    app = create_app(secret_key="test-secret", public_dir=None)
    app.dependency_overrides[get_auth_manager] = lambda: BrokenStoreManager(
        exchange=exchange
    )
    client = TestClient(app)
    state = _start_auth(client)

    response = client.get(
        "/spotify",
        params={"state": state, "code": "good-code"},
        follow_redirects=False,
    )

    assert response.status_code == 200
    assert response.text == "Internal error."
    assert client.get("/analysis").status_code == 401


def _signed_session_cookie(session: Dict, secret_key: str = "test-secret") -> str:
    # Same encoding as starlette's SessionMiddleware.
    data = b64encode(json.dumps(session).encode("utf-8"))
    return TimestampSigner(secret_key).sign(data).decode("utf-8")


def test_analysis_with_corrupted_session_token_is_500(
    client: TestClient, library: FakeMusicLibrary
) -> None:
    client.cookies.set(
        "session",
        _signed_session_cookie({SESSION_TOKEN_KEY: {"token_type": "Bearer"}}),
    )

    response = client.get("/analysis")

    assert response.status_code == 500
    assert response.text == "Internal error."
    assert library.calls == []
