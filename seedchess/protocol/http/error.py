from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, cast

from fastapi import HTTPException as FastAPIHTTPException
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from ...engine.errors import AIBusyError, IllegalActionError


logger = logging.getLogger(__name__)

# Spelled out: starlette renamed the 422 constant across releases
HTTP_422 = 422


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _render(request: Request, status_code: int, message: str) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=message,
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _render(request, exc.status_code, detail)
    return _render(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


async def illegal_action_handler(request: Request, exc: Exception) -> JSONResponse:
    # Rejected game input; the game state is unchanged
    return _render(request, status.HTTP_400_BAD_REQUEST, str(exc) or "illegal action")


async def ai_busy_handler(request: Request, exc: Exception) -> JSONResponse:
    return _render(request, status.HTTP_409_CONFLICT, str(exc) or "AI is busy")


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        return await http_exception_handler(request, exc)
    request_id = getattr(request.state, "request_id", "")
    logger.exception("Unhandled exception", extra={"request_id": request_id})
    return _render(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


async def request_validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        errors.append(
            {
                "field": loc,
                "code": e.get("type", "value_error"),
                "message": e.get("msg", "invalid value"),
            }
        )
    payload = error_envelope(
        code="unprocessable_entity",
        message="Validation error",
        err_type="client_error",
        request_id=request_id,
        field_errors=errors or None,
    )
    return JSONResponse(status_code=HTTP_422, content=payload)


HANDLERS = {
    FastAPIHTTPException: http_exception_handler,
    RequestValidationError: request_validation_exception_handler,
    IllegalActionError: illegal_action_handler,
    AIBusyError: ai_busy_handler,
    Exception: exception_handler,
}


def _status_to_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "bad_request"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if status_code == HTTP_422:
        return "unprocessable_entity"
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
