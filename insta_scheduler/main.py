from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from insta_scheduler.api_routes import router as api_router
from insta_scheduler.config import Settings, load_settings
from insta_scheduler.debug_routes import router as debug_router
from insta_scheduler.graph_client import GraphClient
from insta_scheduler.oauth_routes import router as oauth_router
from insta_scheduler.store import JsonStore

logger = logging.getLogger("insta-scheduler")

GraphClientFactory = Callable[[], GraphClient]


def create_app(
    settings: Settings | None = None,
    graph_client_factory: GraphClientFactory | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    store = JsonStore(settings.accounts_path, settings.schedule_path)

    app = FastAPI(title="Instagram Scheduler Backend")
    app.state.settings = settings
    app.state.store = store
    app.state.graph_client_factory = graph_client_factory or (
        lambda: GraphClient(settings.graph_api_version, timeout=settings.graph_timeout)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def startup() -> None:
        store.ensure_files()
        logger.info(
            "startup fb_app_id=%s accounts_path=%s schedule_path=%s cors_origin=%s",
            settings.fb_app_id,
            settings.accounts_path,
            settings.schedule_path,
            settings.cors_origin,
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        response_status = 500
        try:
            response = await call_next(request)
            response_status = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request method=%s path=%s status=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                response_status,
                duration_ms,
            )

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "root ok"

    @app.get("/healthz", response_class=PlainTextResponse)
    def healthz() -> str:
        return "ok"

    @app.head("/healthz")
    def healthz_head() -> Response:
        return Response(status_code=200)

    app.include_router(oauth_router)
    app.include_router(api_router)
    app.include_router(debug_router)
    return app
