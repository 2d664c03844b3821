"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka.integrations.fastapi import FastapiProvider
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tally.config import DEFAULT_JWT_SECRET, Settings
from tally.interface.api.routes import health, rankings, realtime, votes
from tally.interface.error import register_error_handlers
from tally.util.error import ConfigurationError
from tally.util.di.container import create_container, setup_di
from tally.util.observability import instrument_fastapi


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Disposes the engine and ends open WebSocket subscriptions
    await app.state.dishka_container.close()


def create_app() -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    In tests, conftest.py configures it.
    """
    settings = Settings()

    if settings.environment == "production" and settings.auth.jwt_secret == DEFAULT_JWT_SECRET:
        raise ConfigurationError("AUTH__JWT_SECRET must be set in production")

    app_instance = FastAPI(
        title="Product Vote Tally API",
        description="Vote aggregation, quotas and real-time tallies for product rankings",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.api.frontend_url,
            "http://localhost:3000",  # Local development
        ],
        allow_credentials=True,  # auth_token cookie
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Setup dependency injection
    # Settings are loaded from environment automatically
    container = create_container(FastapiProvider())
    setup_di(app_instance, container)

    register_error_handlers(app_instance)

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(votes.router)
    app_instance.include_router(rankings.router)
    app_instance.include_router(realtime.router)

    return app_instance
