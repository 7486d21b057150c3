"""Common route helpers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from minictl.core.errors import ControllerError, InvalidArguments


def as_http_exception(exc: ControllerError) -> HTTPException:
    """Map a controller error onto its HTTP status with a structured detail."""
    return HTTPException(status_code=exc.status_code, detail=exc.as_detail())


async def invalid_request_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report malformed request bodies and query parameters as 400s."""
    del request
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in errors
    )
    error = InvalidArguments(message or "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": error.as_detail()},
    )
