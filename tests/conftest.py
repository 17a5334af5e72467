# Shared fixtures: settings, stores, and a fake Spotify behind httpx.MockTransport.
# Created: 2026-10-19

import time
import urllib.parse

import httpx
import pytest
from fastapi.testclient import TestClient

from playdeck.auth.credentials import CredentialRecord, MemoryCredentialStore
from playdeck.auth.oauth import SpotifyOAuthClient
from playdeck.config import Settings
from playdeck.server import create_app

FRONTEND = "https://frontend.example"


class FakeSpotify:
    """Stands in for accounts.spotify.com and api.spotify.com.

    Token endpoint: issues ``access-N`` tokens (N = call count) and, for code
    exchanges, ``refresh-1``. Set ``token_status`` to make it fail.
    Web API: replies from ``api_responses[(method, path)]`` or echoes the path.
    """

    def __init__(self):
        self.token_calls: list[dict] = []
        self.api_calls: list[httpx.Request] = []
        self.token_status = 200
        self.rotate_refresh_token = False
        self.api_responses: dict[tuple[str, str], tuple[int, bytes, str | None]] = {}
        self.api_error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "accounts.spotify.com":
            return self._token(request)
        return self._api(request)

    def _token(self, request: httpx.Request) -> httpx.Response:
        form = dict(urllib.parse.parse_qsl(request.content.decode()))
        self.token_calls.append(
            {"form": form, "authorization": request.headers.get("authorization")}
        )
        if self.token_status != 200:
            return httpx.Response(
                self.token_status,
                json={"error": "invalid_grant", "error_description": "Invalid authorization code"},
            )

        n = len(self.token_calls)
        body = {
            "access_token": f"access-{n}",
            "token_type": "Bearer",
            "expires_in": 3600,
            "scope": "user-read-playback-state user-modify-playback-state",
        }
        if form.get("grant_type") == "authorization_code":
            body["refresh_token"] = "refresh-1"
        elif self.rotate_refresh_token:
            body["refresh_token"] = f"refresh-{n}"
        return httpx.Response(200, json=body)

    def _api(self, request: httpx.Request) -> httpx.Response:
        self.api_calls.append(request)
        if self.api_error is not None:
            raise self.api_error
        key = (request.method, request.url.path.removeprefix("/v1"))
        if key in self.api_responses:
            status, content, content_type = self.api_responses[key]
            headers = {"content-type": content_type} if content_type else {}
            return httpx.Response(status, content=content, headers=headers)
        return httpx.Response(200, json={"path": key[1], "query": request.url.query.decode()})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_record(access_token="access-0", refresh_token="refresh-0", expires_in=3600.0):
    return CredentialRecord(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=time.time() + expires_in,
    )


@pytest.fixture
def fake_spotify():
    return FakeSpotify()


@pytest.fixture
def memory_store():
    return MemoryCredentialStore()


@pytest.fixture
def oauth(fake_spotify):
    return SpotifyOAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://testserver/callback",
        transport=fake_spotify.transport,
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        spotify_client_id="client-id",
        spotify_client_secret="client-secret",
        spotify_redirect_uri="http://testserver/callback",
        frontend_origin=FRONTEND,
        session_secret="test-session-secret",
        cookie_secure=False,
        cookie_samesite="lax",
        config_dir=tmp_path,
    )


@pytest.fixture
def app(settings, memory_store, fake_spotify):
    return create_app(settings, store=memory_store, transport=fake_spotify.transport)


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)
