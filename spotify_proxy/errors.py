# spotify_proxy/errors.py
from contextlib import contextmanager
from typing import Any, Optional


class SpotifyProxyError(Exception):
    """Base for every failure that ends up as a JSON error response."""

    status_code = 500
    error = "Internal error"

    def __init__(self, error: Optional[str] = None, details: Any = None):
        if error is not None:
            self.error = error
        self.details = details
        super().__init__(self.error)

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotAuthenticated(SpotifyProxyError):
    status_code = 401
    error = "Not authenticated with Spotify"
    login_url = "/login"

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["login_url"] = self.login_url
        return body


class MissingInput(SpotifyProxyError):
    status_code = 400
    error = "Missing input"


class RefreshError(SpotifyProxyError):
    """Raised by TokenStore.refresh when a new access token can't be obtained."""


class NoRefreshToken(RefreshError):
    status_code = 400
    error = "No refresh token available"


class UpstreamRejected(SpotifyProxyError):
    """Spotify answered with an error status, or couldn't be reached at all."""

    status_code = 500
    error = "Spotify request failed"

    def __init__(self, details: Any = None, upstream_status: Optional[int] = None, error: Optional[str] = None):
        super().__init__(error=error, details=details)
        self.upstream_status = upstream_status

    @classmethod
    def from_response(cls, resp) -> "UpstreamRejected":
        # Spotify error bodies are JSON ({"error": {...}}), but proxies in between may not be
        try:
            details = resp.json()
        except ValueError:
            details = resp.text or f"http {resp.status_code}"
        return cls(details, upstream_status=resp.status_code)


class RefreshRejected(UpstreamRejected, RefreshError):
    """The token endpoint refused the refresh grant (e.g. invalid_grant for a revoked token)."""

    error = "Failed to refresh token"


@contextmanager
def upstream_failure(message: str):
    """
    Relabel any UpstreamRejected raised inside the block with `message`.

    Lookups on a reply that doesn't have the expected shape (missing keys, an
    empty artists list) are reported the same way.
    """
    try:
        yield
    except UpstreamRejected as e:
        e.error = message
        raise
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise UpstreamRejected(f"Unexpected response from Spotify: {e!r}", error=message) from e
