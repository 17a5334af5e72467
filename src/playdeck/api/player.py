# Player router — session-gated pass-through to the Spotify Web API.
# Created: 2026-10-19
#
# Every route maps to exactly one upstream call. Query strings and JSON
# bodies go through untouched; status and body come back untouched.

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from playdeck.api.deps import get_services, require_session
from playdeck.api.schemas import ErrorResponse
from playdeck.proxy import UpstreamResponse

router = APIRouter(prefix="/api", tags=["Player"], dependencies=[Depends(require_session)])


def relay(upstream: UpstreamResponse) -> Response:
    """Turn an upstream outcome into the browser response, byte for byte."""
    if upstream.is_empty:
        return Response(status_code=204)
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.content_type or "application/json",
    )


async def _forward(
    request: Request, method: str, upstream_path: str, with_body: bool = False
) -> Response:
    services = get_services(request)
    body = await request.body() if with_body else None
    upstream = await services.proxy.forward(
        method,
        upstream_path,
        query=request.url.query,
        body=body,
        identity=request.state.session.identity,
    )
    return relay(upstream)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/me")
async def get_me(request: Request):
    return await _forward(request, "GET", "/me")


@router.get("/player/state")
async def get_player_state(request: Request):
    """Current playback state. 204 when nothing is active."""
    return await _forward(request, "GET", "/me/player")


@router.get("/player/devices")
async def get_devices(request: Request):
    return await _forward(request, "GET", "/me/player/devices")


@router.get("/player/queue")
async def get_queue(request: Request):
    return await _forward(request, "GET", "/me/player/queue")


@router.get("/top-tracks")
async def get_top_tracks(request: Request):
    return await _forward(request, "GET", "/me/top/tracks")


@router.get("/top-artists")
async def get_top_artists(request: Request):
    return await _forward(request, "GET", "/me/top/artists")


@router.get("/recently-played")
async def get_recently_played(request: Request):
    return await _forward(request, "GET", "/me/player/recently-played")


@router.get("/playlists")
async def get_playlists(request: Request):
    return await _forward(request, "GET", "/me/playlists")


@router.get("/playlists/{playlist_id}/tracks")
async def get_playlist_tracks(request: Request, playlist_id: str):
    return await _forward(request, "GET", f"/playlists/{playlist_id}/tracks")


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------


@router.put("/like")
async def like_tracks(request: Request):
    """Save tracks to the library (``?ids=a,b,c``)."""
    if not request.query_params.get("ids", "").strip():
        return JSONResponse(
            status_code=400, content=ErrorResponse(error="Missing ids").model_dump()
        )
    return await _forward(request, "PUT", "/me/tracks")


# ---------------------------------------------------------------------------
# Playback control
# ---------------------------------------------------------------------------


@router.post("/player/next")
async def next_track(request: Request):
    return await _forward(request, "POST", "/me/player/next")


@router.post("/player/previous")
async def previous_track(request: Request):
    return await _forward(request, "POST", "/me/player/previous")


@router.put("/player/play")
async def play(request: Request):
    """Start/resume playback. Optional JSON body (context_uri, uris, offset)."""
    return await _forward(request, "PUT", "/me/player/play", with_body=True)


@router.put("/player/pause")
async def pause(request: Request):
    return await _forward(request, "PUT", "/me/player/pause")


@router.put("/player/shuffle")
async def shuffle(request: Request):
    return await _forward(request, "PUT", "/me/player/shuffle")


@router.put("/player/repeat")
async def repeat(request: Request):
    return await _forward(request, "PUT", "/me/player/repeat")


@router.put("/player/transfer")
async def transfer(request: Request):
    """Move playback to another device (``{"device_ids": [...], "play": bool}``)."""
    return await _forward(request, "PUT", "/me/player", with_body=True)
