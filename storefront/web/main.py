from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import Settings, settings as default_settings
from storefront.db.sqlite import Database
from storefront.errors import StoreError
from storefront.flags import FlagRouter
from storefront.web import admin, store

logger = logging.getLogger(__name__)


def _error(status_code: int, type_: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"type": type_, "message": message})


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    flags: Optional[FlagRouter] = None,
) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="Storefront API")
    app.state.settings = settings
    app.state.db = db or Database(settings.db_path, timeout=settings.db_timeout)
    app.state.flags = flags or FlagRouter(settings.feature_flags)

    if settings.store_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.store_cors),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(store.router)
    app.include_router(admin.router)

    @app.on_event("startup")
    def _startup() -> None:
        app.state.db.init_db()
        logger.info("database ready at %s", app.state.db.path)

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.type, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        msg = "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors())
        return _error(400, "invalid_data", msg or "Invalid request")

    return app


app = create_app()
