# spotify_proxy/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from .accounts import SpotifyAccounts, generate_state
from .errors import MissingInput, upstream_failure
from .tokens import TokenStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_accounts(request: Request) -> SpotifyAccounts:
    return request.app.state.accounts


@router.get("/login")
def spotify_login(accounts: SpotifyAccounts = Depends(get_accounts)):
    settings = accounts.settings
    if not settings.client_id or not settings.redirect_uri:
        return JSONResponse(status_code=500, content={"error": "Spotify env vars not configured"})

    return RedirectResponse(accounts.authorize_url(generate_state(16)), status_code=302)


@router.get("/spotify/callback")
def spotify_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    accounts: SpotifyAccounts = Depends(get_accounts),
    store: TokenStore = Depends(get_token_store),
):
    if error:
        raise MissingInput(f"Spotify auth error: {error}")
    if not code:
        raise MissingInput("Missing code in callback")

    with upstream_failure("Failed to get tokens"):
        token_data = accounts.exchange_code(code)

    store.set_tokens(token_data["access_token"], token_data.get("refresh_token", ""))
    return PlainTextResponse("Authorization successful. You can now use the API endpoints.")


@router.get("/refresh_token")
def refresh_token(store: TokenStore = Depends(get_token_store)):
    with upstream_failure("Failed to refresh token"):
        store.refresh()
    return {"message": "Token refreshed successfully"}
