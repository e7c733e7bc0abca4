from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from sla_engine.core.config import settings
from sla_engine.core.exceptions import SLAEngineException
from sla_engine.core.logging import setup_logging
from sla_engine.core.security_headers import install_security_headers_middleware
from sla_engine.routers import sla_configurations

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    settings.validate_runtime_settings()

    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts,
    )
    install_security_headers_middleware(app, settings)

    app.include_router(
        sla_configurations.router,
        prefix="/api/sla-configurations",
        tags=["sla-configurations"],
    )

    @app.exception_handler(SLAEngineException)
    async def handle_sla_engine_exception(_: Request, exc: SLAEngineException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed: %s (%s)", exc.message, exc.error_code)
        headers = exc.headers if getattr(exc, "headers", None) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        # rejected inputs may be NaN or Infinity, which strict JSON cannot echo back
        errors = [{key: value for key, value in error.items() if key not in ("input", "ctx")} for error in exc.errors()]
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})

    return app


app = create_app()
