"""CORS for browser game clients."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conquest.config import Settings

GAME_REQUEST_HEADERS = ["Content-Type", "X-Session", "X-Master-Version", "X-Isu-Date", "X-Request-Id"]
GAME_RESPONSE_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "Retry-After"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    # Sessions travel in X-Session, never in cookies; a wildcard origin must not allow credentials.
    wildcard = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=GAME_REQUEST_HEADERS,
        expose_headers=GAME_RESPONSE_HEADERS,
    )
