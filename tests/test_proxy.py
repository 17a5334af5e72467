# Tests for proxy.py (SpotifyProxy)
# Created: 2026-10-19

import json

import httpx
import pytest
from conftest import make_record

from playdeck.auth.tokens import TokenManager
from playdeck.errors import NotAuthenticated, TokenRefreshFailed, UpstreamUnavailable
from playdeck.proxy import SpotifyProxy


@pytest.fixture
def proxy(memory_store, oauth, fake_spotify):
    return SpotifyProxy(TokenManager(memory_store, oauth), transport=fake_spotify.transport)


@pytest.fixture
def authed(memory_store):
    memory_store.save(make_record(access_token="live-token"))


async def test_attaches_bearer_token(proxy, authed, fake_spotify):
    resp = await proxy.forward("GET", "/me/player")

    assert resp.status_code == 200
    request = fake_spotify.api_calls[0]
    assert request.headers["authorization"] == "Bearer live-token"
    assert str(request.url) == "https://api.spotify.com/v1/me/player"


async def test_no_content_is_relayed_as_204(proxy, authed, fake_spotify):
    fake_spotify.api_responses[("GET", "/me/player")] = (204, b"", None)

    resp = await proxy.forward("GET", "/me/player")

    assert resp.status_code == 204
    assert resp.content == b""
    assert resp.is_empty
    assert not resp.is_error


async def test_error_payload_relayed_verbatim(proxy, authed, fake_spotify):
    payload = b'{"error": {"status": 429, "message": "API rate limit exceeded"}}'
    fake_spotify.api_responses[("GET", "/me/top/tracks")] = (429, payload, "application/json")

    resp = await proxy.forward("GET", "/me/top/tracks")

    assert resp.status_code == 429
    assert resp.content == payload
    assert resp.content_type == "application/json"
    assert resp.is_error


async def test_no_credentials_skips_upstream(proxy, fake_spotify):
    with pytest.raises(NotAuthenticated):
        await proxy.forward("GET", "/me/player")
    assert fake_spotify.api_calls == []


async def test_query_string_passes_through(proxy, authed, fake_spotify):
    await proxy.forward("GET", "/me/top/tracks", query="time_range=short_term&limit=10")

    assert fake_spotify.api_calls[0].url.query == b"time_range=short_term&limit=10"


async def test_raw_query_is_not_reencoded(proxy, authed, fake_spotify):
    await proxy.forward("PUT", "/me/tracks", query="ids=a,b&r=%20z&flag")

    assert fake_spotify.api_calls[0].url.query == b"ids=a,b&r=%20z&flag"


async def test_mapping_query_is_encoded(proxy, authed, fake_spotify):
    await proxy.forward("GET", "/me/top/tracks", query={"limit": "5"})

    assert fake_spotify.api_calls[0].url.query == b"limit=5"


async def test_json_body_passes_through(proxy, authed, fake_spotify):
    body = json.dumps({"device_ids": ["dev1"], "play": True}).encode()

    await proxy.forward("PUT", "/me/player", body=body)

    request = fake_spotify.api_calls[0]
    assert request.method == "PUT"
    assert request.content == body
    assert request.headers["content-type"] == "application/json"


async def test_mutating_call_without_body_sends_empty_content(proxy, authed, fake_spotify):
    await proxy.forward("POST", "/me/player/next")

    request = fake_spotify.api_calls[0]
    assert request.method == "POST"
    assert request.content == b""


async def test_network_failure_raises_upstream_unavailable(proxy, authed, fake_spotify):
    fake_spotify.api_error = httpx.ConnectTimeout("timed out")

    with pytest.raises(UpstreamUnavailable) as exc_info:
        await proxy.forward("GET", "/me/player")
    assert exc_info.value.status_code == 502


async def test_refresh_failure_propagates(proxy, memory_store, fake_spotify):
    memory_store.save(make_record(expires_in=0))
    fake_spotify.token_status = 400

    with pytest.raises(TokenRefreshFailed):
        await proxy.forward("GET", "/me/player")
    assert fake_spotify.api_calls == []
