import logging
from typing import Optional

import requests
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .accounts import SpotifyAccounts
from .auth import router as auth_router
from .config import Settings, load_settings
from .errors import SpotifyProxyError
from .logging_config import setup_logging
from .spotify_routes import router as spotify_router
from .tokens import TokenStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TokenStore] = None,
    session: Optional[requests.Session] = None,
) -> FastAPI:
    settings = settings or load_settings()
    session = session or requests.Session()
    accounts = SpotifyAccounts(settings, session)

    app = FastAPI(
        title="Spotify Playback Proxy",
        version="1.0.0"
    )

    app.state.settings = settings
    app.state.session = session
    app.state.accounts = accounts
    app.state.token_store = store or TokenStore(accounts)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SpotifyProxyError)
    async def spotify_proxy_error(request: Request, exc: SpotifyProxyError):
        logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/health")
    def health():
        return {"message": "ok"}

    app.include_router(auth_router)
    app.include_router(spotify_router)
    return app


settings = load_settings()
setup_logging(settings.log_level)
app = create_app(settings)


def run():
    if not settings.has_credentials:
        logger.warning("SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set, /login will not work")
    logger.info("Server starting on %s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
