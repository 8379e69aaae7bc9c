# spotify_proxy/tokens.py
"""
In-memory token store for the single Spotify user this process acts for.

Nothing is persisted: a restart means going through /login again. The store
never drops back to "unauthenticated" on its own; if Spotify keeps answering
401, the caller has to refresh (GET /refresh_token) or log in again.
"""
import logging
import threading

from .accounts import SpotifyAccounts
from .errors import NoRefreshToken, RefreshRejected, UpstreamRejected

logger = logging.getLogger(__name__)


class TokenStore:
    def __init__(self, accounts: SpotifyAccounts):
        self.accounts = accounts
        self._access_token = ""
        self._refresh_token = ""
        self._lock = threading.Lock()

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        with self._lock:
            self._access_token = access_token or ""
            self._refresh_token = refresh_token or ""
        logger.info("Stored new Spotify tokens")

    def get_access_token(self) -> str:
        return self._access_token

    def get_refresh_token(self) -> str:
        return self._refresh_token

    def is_authorized(self) -> bool:
        return self._access_token != ""

    def refresh(self) -> None:
        """
        Swap the refresh token for a new access token.

        Raises NoRefreshToken when there is nothing to refresh (no network call
        is made) and RefreshRejected when Spotify refuses, e.g. invalid_grant
        for a revoked token. On failure the current pair is left untouched.
        """
        refresh_token = self._refresh_token
        if not refresh_token:
            raise NoRefreshToken()

        try:
            token_data = self.accounts.refresh_access_token(refresh_token)
        except UpstreamRejected as e:
            logger.warning("Spotify rejected the token refresh, keeping the old tokens")
            raise RefreshRejected(e.details, upstream_status=e.upstream_status) from e

        with self._lock:
            self._access_token = token_data["access_token"]
            # Spotify may or may not return a new refresh_token
            if token_data.get("refresh_token"):
                self._refresh_token = token_data["refresh_token"]
        logger.info("Refreshed Spotify access token")
