# spotify_proxy/spotify_routes.py
import logging
import urllib.parse
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from .auth import get_token_store
from .errors import NotAuthenticated, UpstreamRejected, upstream_failure
from .spotify import SpotifyClient
from .tokens import TokenStore

logger = logging.getLogger(__name__)

router = APIRouter()


class PlayRequest(BaseModel):
    uri: Optional[str] = None


def get_spotify_client(request: Request, store: TokenStore = Depends(get_token_store)) -> SpotifyClient:
    settings = request.app.state.settings
    return SpotifyClient(
        store,
        request.app.state.session,
        api_base=settings.api_base,
        timeout=settings.request_timeout,
    )


def play_url(uri: str) -> str:
    # same escaping as JS encodeURIComponent
    return "/play?uri=" + urllib.parse.quote(uri, safe="-_.!~*'()")


def _track_summary(track: dict) -> dict:
    return {
        "name": track["name"],
        "artist": track["artists"][0]["name"],
        "album": track["album"]["name"],
        "uri": track["uri"],
    }


def _now_playing(payload: Optional[dict]) -> Optional[dict]:
    # item is null while an ad or an unavailable episode is on
    if not payload or not payload.get("item"):
        return None
    track = payload["item"]
    return {
        **_track_summary(track),
        "progress_ms": payload.get("progress_ms"),
        "duration_ms": track.get("duration_ms"),
    }


@router.get("/me/following")
def followed_artists(client: SpotifyClient = Depends(get_spotify_client)):
    with upstream_failure("Failed to fetch followed artists"):
        names = [artist["name"] for artist in client.get_followed_artists()]
    return {"followed_artists": names}


@router.put("/pause")
def pause_playback(client: SpotifyClient = Depends(get_spotify_client)):
    with upstream_failure("Failed to pause playback"):
        client.pause()
    return {"message": "Playback paused."}


@router.get("/top-tracks/{artist_id}")
def artist_top_tracks(artist_id: str, client: SpotifyClient = Depends(get_spotify_client)):
    with upstream_failure("Failed to fetch top tracks"):
        tracks = client.get_artist_top_tracks(artist_id)
        top_tracks = [{"name": t["name"], "uri": t["uri"]} for t in tracks[:10]]
    return {"top_tracks": top_tracks}


@router.put("/play")
def play_track(body: Optional[PlayRequest] = None, client: SpotifyClient = Depends(get_spotify_client)):
    uri = body.uri if body else None
    with upstream_failure("Failed to play track"):
        client.play(uri)
    return {"message": f"Started playing track: {uri}"}


@router.get("/play")
def play_track_link(uri: Optional[str] = None, client: SpotifyClient = Depends(get_spotify_client)):
    """GET flavour of PUT /play, so the play_url links in /spotify work from a browser."""
    with upstream_failure("Failed to play track"):
        client.play(uri)
    return {"message": f"Started playing track: {uri}"}


@router.get("/me/top-tracks")
def my_top_tracks(client: SpotifyClient = Depends(get_spotify_client)):
    with upstream_failure("Failed to fetch your top tracks"):
        top_tracks = [_track_summary(t) for t in client.get_my_top_tracks()]
    return {"top_tracks": top_tracks}


@router.get("/me/now-playing")
def now_playing(client: SpotifyClient = Depends(get_spotify_client)):
    with upstream_failure("Failed to fetch currently playing track"):
        payload = client.get_currently_playing()
        current = _now_playing(payload)

    if payload is None:
        return {"now_playing": None, "message": "No track currently playing"}
    return {"now_playing": current}


@router.get("/spotify")
def spotify_overview(
    client: SpotifyClient = Depends(get_spotify_client),
    store: TokenStore = Depends(get_token_store),
):
    """Followed artists, top tracks and the current track in one response."""
    if not store.is_authorized():
        raise NotAuthenticated()

    with upstream_failure("Failed to fetch Spotify data"):
        following = [
            {"name": artist["name"], "id": artist["id"]}
            for artist in client.get_followed_artists()
        ]
        top_tracks = [
            {
                "name": track["name"],
                "artist": track["artists"][0]["name"],
                "uri": track["uri"],
                "play_url": play_url(track["uri"]),
            }
            for track in client.get_my_top_tracks()
        ]

    # a failing now-playing lookup shouldn't take the whole overview down
    current = None
    try:
        with upstream_failure("Failed to fetch currently playing track"):
            current = _now_playing(client.get_currently_playing())
    except UpstreamRejected as e:
        logger.error("Error fetching now playing: %s", e.details)

    return {
        "now_playing": current,
        "stop_playback_url": "/pause",
        "followed_artists": following,
        "top_tracks": top_tracks,
    }
