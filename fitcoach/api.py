# -*- coding: utf-8 -*-
"""
FitCoach API v1

Coaches author foods, meals, days, weekly meal plans and exercise plans and
assign them to their trainees; trainees track weight and plan history.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .app_db import init_app_db
from .auth.api import router as auth_router
from .auth.security import InvalidToken, resolve_request_user
from .config import settings
from .errors import DataError, FailedValidation, error_body
from .exercise.api import router as exercise_router
from .meals.api import router as meals_router
from .plans.api import router as plans_router
from .users.api import router as users_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"

app = FastAPI(
    title="FitCoach",
    description="Multi-tenant fitness coaching backend",
    version="1.0.0",
    docs_url="/v1/docs",
    redoc_url="/v1/redoc",
    openapi_url="/v1/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.db_path)


# Ensure the database exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.db_path)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    """Resolve the bearer token once; handlers pick the user up from request.state."""
    try:
        request.state.user = await run_in_threadpool(resolve_request_user, request)
    except InvalidToken as exc:
        logger.debug("rejected token on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=401,
            content={"error": "invalid or missing authentication token"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await call_next(request)


def _error(status_code: int, message: Any, headers: Dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _bad_request_message(errors: Sequence[Dict[str, Any]]) -> str:
    if not errors:
        return "bad request"
    first = errors[0]
    loc = tuple(first.get("loc") or ())
    kind = first.get("type") or ""
    if loc and loc[0] == "path":
        return "invalid id parameter"
    if kind == "json_invalid":
        position = loc[1] if len(loc) > 1 else None
        if isinstance(position, int):
            return f"body contains badly-formed JSON (at character {position})"
        return "body contains badly-formed JSON"
    if kind == "extra_forbidden" and len(loc) > 1:
        return f'body contains unknown key "{loc[-1]}"'
    if kind == "missing" and loc == ("body",):
        return "body must not be empty"
    if len(loc) > 1 and loc[0] == "body":
        field = ".".join(str(part) for part in loc[1:])
        return f'body contains incorrect JSON type for field "{field}"'
    if loc == ("body",):
        return "body must be a single JSON object"
    return "bad request"


@app.exception_handler(DataError)
async def _data_error_handler(request: Request, exc: DataError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


@app.exception_handler(FailedValidation)
async def _failed_validation_handler(request: Request, exc: FailedValidation):
    return _error(422, exc.errors)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return _error(400, _bad_request_message(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error(404, "the requested resource could not be found")
    if exc.status_code == 405:
        return _error(405, f"the {request.method} method is not supported for this resource", exc.headers)
    return _error(exc.status_code, exc.detail, exc.headers)


@app.exception_handler(Exception)
async def _server_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url)
    return _error(500, SERVER_ERROR_MESSAGE)


@app.get("/v1/healthcheck", tags=["System"])
def healthcheck():
    return {
        "status": "available",
        "system_info": {"version": app.version},
    }


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(meals_router)
app.include_router(plans_router)
app.include_router(exercise_router)


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    host = os.environ.get("FITCOACH_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("FITCOACH_PORT") or os.environ.get("PORT") or "4000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 4000

    uvicorn.run("fitcoach.api:app", host=host, port=port, reload=False)
