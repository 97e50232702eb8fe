"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from icebreaker.domain.exceptions import (
    InvalidAnswer,
    InvalidRadius,
    MatchingError,
    NotDiscoverable,
    StoreContention,
    UnknownQuestion,
    UserNotFound,
)
from icebreaker.obs.logging import current_request_id

_STATUS_BY_ERROR: tuple[tuple[type[MatchingError], int], ...] = (
    (InvalidRadius, 422),
    (InvalidAnswer, 422),
    (UnknownQuestion, status.HTTP_404_NOT_FOUND),
    (UserNotFound, status.HTTP_404_NOT_FOUND),
    (NotDiscoverable, status.HTTP_409_CONFLICT),
    (StoreContention, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or current_request_id()


def status_for(exc: MatchingError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MatchingError)
    async def matching_exc_handler(request: Request, exc: MatchingError):  # type: ignore[override]
        payload = {"detail": exc.reason, "request_id": _request_id(request)}
        headers = {"Retry-After": "1"} if isinstance(exc, StoreContention) else None
        return JSONResponse(status_code=status_for(exc), content=payload, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        payload = {"detail": exc.detail, "request_id": _request_id(request)}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
        payload = {"detail": "validation_error", "errors": errors, "request_id": _request_id(request)}
        return JSONResponse(status_code=422, content=payload)
