from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from themekit.api.responses import response_meta
from themekit.themes.resolver import UnsupportedThemeOperationError

logger = logging.getLogger(__name__)


class ApiException(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


def error_payload(
    request: Request,
    *,
    code: str,
    message: str,
    details: Any | None = None,
) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
        "meta": response_meta(request),
    }


async def _handle_api_exception(request: Request, exc: ApiException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(
            request,
            code=exc.code,
            message=exc.message,
            details=exc.details,
        ),
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_payload(
            request,
            code="validation_error",
            message="Request validation failed.",
            details=jsonable_encoder(exc.errors()),
        ),
    )


async def _handle_unsupported_theme_operation(
    request: Request,
    exc: UnsupportedThemeOperationError,
) -> JSONResponse:
    logger.info(
        "theme.change_rejected",
        extra={"event": "theme.change_rejected", "path": request.url.path},
    )
    return JSONResponse(
        status_code=405,
        content=error_payload(
            request,
            code="theme_change_unsupported",
            message=str(exc),
        ),
    )


def register_api_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiException, _handle_api_exception)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(
        UnsupportedThemeOperationError,
        _handle_unsupported_theme_operation,
    )
