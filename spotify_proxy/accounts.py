# spotify_proxy/accounts.py
import base64
import logging
import secrets
import string
import urllib.parse

import requests

from .config import Settings
from .errors import UpstreamRejected

logger = logging.getLogger(__name__)

STATE_ALPHABET = string.ascii_lowercase + string.digits


def generate_state(length: int = 16) -> str:
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(length))


class SpotifyAccounts:
    """Client for the accounts service: the authorize redirect and the token endpoint."""

    def __init__(self, settings: Settings, session: requests.Session):
        self.settings = settings
        self.session = session

    @property
    def token_url(self) -> str:
        return f"{self.settings.accounts_base}/api/token"

    def authorize_url(self, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.settings.client_id,
            "scope": self.settings.scope,
            "redirect_uri": self.settings.redirect_uri,
            "state": state,
        }
        return f"{self.settings.accounts_base}/authorize?" + urllib.parse.urlencode(params)

    def _basic_auth_header(self) -> str:
        raw = f"{self.settings.client_id}:{self.settings.client_secret}".encode()
        return "Basic " + base64.b64encode(raw).decode()

    def _request_token(self, payload: dict) -> dict:
        headers = {
            "Authorization": self._basic_auth_header(),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        try:
            resp = self.session.request(
                "POST",
                self.token_url,
                data=payload,
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning("Token endpoint unreachable: %s", e)
            raise UpstreamRejected(str(e))

        if not resp.ok:
            logger.warning("Token endpoint answered %s for grant_type=%s", resp.status_code, payload["grant_type"])
            raise UpstreamRejected.from_response(resp)

        try:
            token_data = resp.json()
        except ValueError:
            raise UpstreamRejected(resp.text or None, upstream_status=resp.status_code)
        # a 200 without an access_token is no better than an error
        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise UpstreamRejected(token_data, upstream_status=resp.status_code)
        return token_data

    def exchange_code(self, code: str) -> dict:
        return self._request_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.settings.redirect_uri,
        })

    def refresh_access_token(self, refresh_token: str) -> dict:
        return self._request_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
