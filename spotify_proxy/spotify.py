# spotify_proxy/spotify.py
import logging
from typing import Optional

import requests

from .errors import MissingInput, NotAuthenticated, UpstreamRejected
from .tokens import TokenStore

logger = logging.getLogger(__name__)


class SpotifyClient:
    def __init__(self, store: TokenStore, session: requests.Session,
                 api_base: str = "https://api.spotify.com/v1", timeout: float = 10.0):
        self.store = store
        self.session = session
        self.api_base = api_base
        self.timeout = timeout

    def get_headers(self):
        access_token = self.store.get_access_token()
        if not access_token:
            raise NotAuthenticated()
        return {
            "Authorization": f"Bearer {access_token}"
        }

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Call the Web API with the current access token.

        Returns the response for any 2xx status. Everything else, including
        network errors, becomes UpstreamRejected. There's no retry and no
        automatic refresh on 401.
        """
        headers = self.get_headers()
        url = f"{self.api_base}{path}"
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise UpstreamRejected(str(e))

        if not resp.ok:
            logger.warning("%s %s -> %s", method, path, resp.status_code)
            raise UpstreamRejected.from_response(resp)
        return resp

    def _json(self, resp: requests.Response, *keys):
        """Decode a 2xx body and walk down `keys`; a body we can't read is UpstreamRejected too."""
        try:
            data = resp.json()
            for key in keys:
                data = data[key]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("Unexpected body from Spotify (status %s)", resp.status_code)
            raise UpstreamRejected(resp.text or None, upstream_status=resp.status_code)
        return data

    def get_followed_artists(self, limit: int = 20):
        resp = self.request("GET", "/me/following", params={"type": "artist", "limit": limit})
        return self._json(resp, "artists", "items")

    def get_artist_top_tracks(self, artist_id: str, market: str = "US"):
        resp = self.request("GET", f"/artists/{artist_id}/top-tracks", params={"market": market})
        return self._json(resp, "tracks")

    def get_my_top_tracks(self, limit: int = 10, time_range: str = "short_term"):
        resp = self.request("GET", "/me/top/tracks", params={"limit": limit, "time_range": time_range})
        return self._json(resp, "items")

    def get_currently_playing(self) -> Optional[dict]:
        resp = self.request("GET", "/me/player/currently-playing")
        # 204 No Content when nothing is playing
        if resp.status_code == 204 or not resp.content:
            return None
        return self._json(resp)

    def pause(self) -> None:
        self.request("PUT", "/me/player/pause")

    def play(self, uri: Optional[str]) -> None:
        if not uri:
            raise MissingInput("URI is required")
        self.request("PUT", "/me/player/play", json={"uris": [uri]})
