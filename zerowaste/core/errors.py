# zerowaste/core/errors.py
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from zerowaste.core.config import get_settings

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """
    HTTPException carrying a machine-readable `code`.

    Rendered as:
        {"success": false, "message": "<detail>", "code": "<CODE>"}
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code


def _error_body(exc: StarletteHTTPException) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False}

    # Services may pass a dict detail with extra fields (e.g. "missing").
    if isinstance(exc.detail, dict):
        body.update(exc.detail)
        body.setdefault("message", "Request failed")
    else:
        body["message"] = exc.detail

    code = getattr(exc, "code", None)
    if code:
        body["code"] = code
    return body


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Field-level validation failures -> 400 (not FastAPI's default 422).
    """
    errors = []
    for err in exc.errors():
        # loc = ("body", "productId") / ("query", "page") / ("body",)
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append(
            {
                "field": ".".join(loc) or None,
                "message": err.get("msg", "Invalid value"),
            }
        )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation error",
            "errors": errors,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler: 500 with the exception text only in development.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = get_settings()
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "Internal server error",
            "error": str(exc) if settings.is_development else "Internal server error",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
