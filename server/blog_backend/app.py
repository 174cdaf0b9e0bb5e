"""
FastAPI application entry point for the blog backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blog_backend.config import get_settings
from blog_backend.errors import DependencyFailure, ServiceError
from blog_backend.routes import router

logger = logging.getLogger(__name__)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if isinstance(exc, DependencyFailure):
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Only locations and messages; echoing input could leak secrets.
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "invalid_argument",
            "message": "Request validation failed",
            "details": details,
        },
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Message is generic; details only go to the log.
    logger.exception("%s %s failed unexpectedly", request.method, request.url.path)
    error = ServiceError("Internal server error")
    return JSONResponse(status_code=error.status_code, content=error.as_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Blog Backend (FastAPI)", version="0.1.0")
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
