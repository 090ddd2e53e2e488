"""FastAPI application entrypoint for the authentication service."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth_service.api import api_router
from auth_service.core.config import get_settings
from auth_service.core.errors import AuthServiceError, ErrorKind
from auth_service.core.security import StateSigner
from auth_service.services.auth import build_auth_service
from auth_service.services.github_oauth import GitHubOAuthClient
from auth_service.services.record_store import RecordStoreClient

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = RecordStoreClient.from_settings(settings)
    github = GitHubOAuthClient.from_settings(settings)
    app.state.auth_service = build_auth_service(store, settings)
    app.state.github_client = github
    app.state.state_signer = StateSigner(settings.jwt_secret)
    app.state.settings = settings
    logger.info("Using record store at %s", settings.record_store_url)

    try:
        yield
    finally:
        await store.aclose()
        await github.aclose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthServiceError)
async def auth_service_error_handler(_: Request, exc: AuthServiceError) -> JSONResponse:
    if exc.kind is ErrorKind.UPSTREAM:
        logger.warning("Upstream failure (%s): %s", exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(api_router)
