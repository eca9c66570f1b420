"""FastAPI application factory.

Serves the users service endpoints consumed by the admin page and the
admin dashboard endpoint that runs the page pipeline.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Generator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from userdash.client.users_api import UsersApiClient
from userdash.config import Settings
from userdash.db.repo import DbSession
from userdash.db.session import get_session, init_db

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the app was created with."""
    return request.app.state.settings


def get_db_session(request: Request) -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session(request.app.state.settings.db_path)
    try:
        yield session
    finally:
        session.close()


async def get_users_client(request: Request) -> AsyncGenerator[UsersApiClient, None]:
    """Dependency yielding an authorized client for the users service."""
    client = UsersApiClient.from_settings(request.app.state.settings)
    try:
        yield client
    finally:
        await client.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        settings: Optional settings; defaults to the environment.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(settings.db_path)
        logger.info(f"Users database ready at {settings.db_path}")
        yield

    app = FastAPI(
        title="userdash API",
        description="Users service and admin users dashboard",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add CORS middleware for UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routes
    from userdash.api.routes import admin, users

    app.include_router(users.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/admin")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app
