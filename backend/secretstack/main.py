"""
Secret Stack - FastAPI Application

A small multi-user site: sign in locally or with Google, then post and read
anonymous secrets.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from authlib.integrations.httpx_client import AsyncOAuth2Client
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.staticfiles import StaticFiles
from motor.motor_asyncio import AsyncIOMotorClient
from redis.asyncio import Redis

from secretstack.config import Settings, get_settings
from secretstack.context import AppContext
from secretstack.core.exceptions import StoreUnavailable, Unauthenticated
from secretstack.core.logging import configure_logging
from secretstack.database.registry import create_indexes
from secretstack.routers import auth, google, health, pages, secrets
from secretstack.views import STATIC_DIR, redirect_to

logger = logging.getLogger(__name__)

STORE_ERROR_MESSAGE = "The service is temporarily unavailable. Please try again shortly."


def create_app(
    settings: Optional[Settings] = None,
    *,
    mongo_client: Optional[AsyncIOMotorClient] = None,
    redis: Optional[Redis] = None,
    http_client: Optional[AsyncOAuth2Client] = None,
) -> FastAPI:
    """
    Build the ASGI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        mongo_client: Pre-built MongoDB client, e.g. a mock in tests
        redis: Pre-built Redis client for sessions and OAuth state
        http_client: Pre-built OAuth2 client for identity-provider calls
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Startup:
        - Build the application context
        - Create indexes

        Shutdown:
        - Close all connections
        """
        logger.info("Starting up Secret Stack (%s)...", settings.environment)
        ctx = AppContext.build(
            settings,
            mongo_client=mongo_client,
            redis=redis,
            http_client=http_client,
        )
        app.state.context = ctx

        try:
            await create_indexes(ctx.db)
            logger.info("Database indexes created")
        except Exception as e:
            logger.warning("Database initialization warning: %s", e)

        yield

        logger.info("Shutting down Secret Stack...")
        await ctx.close()
        logger.info("Connections closed")

    app = FastAPI(
        title="Secret Stack",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    if settings.is_production:
        @app.middleware("http")
        async def _https_redirect(request: Request, call_next):
            # Trust one proxy hop: the right-most forwarded protocol
            forwarded = request.headers.get("x-forwarded-proto", "")
            if forwarded.split(",")[-1].strip().lower() != "https":
                host = request.headers.get("host", request.url.netloc)
                url = f"https://{host}{request.url.path}"
                if request.url.query:
                    url = f"{url}?{request.url.query}"
                return redirect_to(url)
            return await call_next(request)

    @app.exception_handler(Unauthenticated)
    async def _unauthenticated(request: Request, exc: Unauthenticated):
        return redirect_to("/login")

    @app.exception_handler(StoreUnavailable)
    async def _store_unavailable(request: Request, exc: StoreUnavailable):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return request.app.state.context.views.render(
            request,
            "error",
            {"message": STORE_ERROR_MESSAGE},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Include routers
    app.include_router(health.router)
    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(google.router)
    app.include_router(secrets.router)

    return app


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "secretstack.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        proxy_headers=False,
        log_level=settings.log_level.lower(),
    )
