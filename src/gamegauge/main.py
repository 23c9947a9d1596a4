"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis pool, DB engine).
Middleware, CORS, exception handlers and routers all registered here,
each concern living in its own module.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gamegauge import __version__
from gamegauge.api import api_router
from gamegauge.api.errors import register_exception_handlers
from gamegauge.cache import close_redis, init_redis
from gamegauge.config import settings
from gamegauge.logging_config import configure_logging
from gamegauge.middleware.rate_limit import RateLimitMiddleware
from gamegauge.middleware.request_id import RequestIdMiddleware
from gamegauge.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    logger.info(
        "gamegauge.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("gamegauge.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional — without it requests are simply not rate limited
        logger.warning("gamegauge.redis_unavailable", error=str(e))
        await close_redis()

    yield

    logger.info("gamegauge.shutdown")
    await close_redis()

    from gamegauge.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title="GameGauge API",
        description="Multi-tenant scoreboards — boards, participants and per-round scores",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: gamegauge.main:app)
app = create_app()
