from __future__ import annotations
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went wrong."
CONFLICT_MESSAGE = "Request conflicts with existing data."


def _without_input(errors) -> list[dict]:
    # submitted values are not echoed back; inf/nan inputs would not serialize
    return [{k: v for k, v in error.items() if k != "input"} for error in errors]


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"message": ...}``; causes are logged, never returned."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request.", "errors": jsonable_encoder(_without_input(exc.errors()))},
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error(request: Request, exc: IntegrityError):
        logger.warning("%s %s rejected by the database: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(status_code=409, content={"message": CONFLICT_MESSAGE})

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Database failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": GENERIC_MESSAGE})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": GENERIC_MESSAGE})
