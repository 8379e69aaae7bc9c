import json

import pytest
from fastapi.testclient import TestClient

from spotify_proxy.accounts import SpotifyAccounts
from spotify_proxy.config import Settings
from spotify_proxy.main import create_app
from spotify_proxy.tokens import TokenStore

API = "https://api.spotify.com/v1"
TOKEN_URL = "https://accounts.spotify.com/api/token"


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        if text is not None:
            self.text = text
        elif body is not None:
            self.text = json.dumps(body)
        else:
            self.text = ""
        self.content = self.text.encode()

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Stands in for requests.Session; answers from canned responses keyed by (method, url)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, url, response):
        self.routes.setdefault((method, url), []).append(response)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        queue = self.routes.get((method, url))
        if not queue:
            raise AssertionError(f"unexpected upstream call: {method} {url}")
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def close(self):
        pass


@pytest.fixture
def settings():
    return Settings(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://127.0.0.1:8888/spotify/callback",
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def accounts(settings, session):
    return SpotifyAccounts(settings, session)


@pytest.fixture
def store(accounts):
    return TokenStore(accounts)


@pytest.fixture
def app(settings, store, session):
    return create_app(settings=settings, store=store, session=session)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def logged_in(store):
    store.set_tokens("A1", "R1")
    return store


def track(name, artist="Artist", album="Album", uri=None, duration_ms=200000):
    return {
        "name": name,
        "artists": [{"name": artist}],
        "album": {"name": album},
        "uri": uri or f"spotify:track:{name.lower()}",
        "duration_ms": duration_ms,
    }
