from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator

from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import PerformanceMiddleware
from .db import build_engine, build_session_maker, init_db
from .routers import auth, campaigns, finds, qrcodes, sessions, statistics, users
from .services import auth as auth_service
from .services.session_cleanup import SessionCleanupService

SERVICE_NAME = "egghunt-svc"

logger = logging.getLogger(__name__)

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = build_engine(settings.database_url)
    session_maker = build_session_maker(engine)
    cleanup = SessionCleanupService(
        session_maker,
        enabled=settings.session_cleanup_enabled,
        interval_hours=settings.session_cleanup_interval_hours,
        initial_delay_seconds=settings.session_cleanup_initial_delay_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(engine)
        if settings.admin_bootstrap_username and settings.admin_bootstrap_password:
            async with session_maker() as db:
                await auth_service.ensure_bootstrap_admin(
                    db,
                    username=settings.admin_bootstrap_username,
                    password=settings.admin_bootstrap_password,
                    email=settings.admin_bootstrap_email,
                )
        cleanup.start()
        logger.info("%s started", SERVICE_NAME)

        yield

        await cleanup.stop()
        await engine.dispose()

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_maker = session_maker
    app.state.session_cleanup = cleanup

    app.add_middleware(PerformanceMiddleware, threshold_ms=settings.slow_request_threshold_ms)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(campaigns.router)
    app.include_router(qrcodes.router)
    app.include_router(users.router)
    app.include_router(finds.router)
    app.include_router(sessions.router)
    app.include_router(statistics.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME}

    # one registry per app instance
    Instrumentator(registry=CollectorRegistry()).instrument(app).expose(app)
    return app

app = create_app()
