"""
FastAPI application entry point for the destinations service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.config import get_settings
from backend.dependencies import get_db_client
from backend.routes import router
from backend.schemas import URL_ERROR, HealthResponse
from backend.seed import seed_source_urls

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        if error.get("type", "").startswith("url_"):
            messages.append(URL_ERROR)
            continue
        cause = (error.get("ctx") or {}).get("error")
        if cause is not None:
            messages.append(str(cause))
            continue
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return ", ".join(messages) or "Invalid request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    seed_source_urls(get_db_client(), get_settings())
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Destinations Directory (FastAPI)", version="0.1.0", lifespan=lifespan
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok")

    return app


app = create_app()
