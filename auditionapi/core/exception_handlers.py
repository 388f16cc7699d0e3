import logging
import traceback
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import InternalServerError, ValidationError

logger = logging.getLogger("auditionapi")


def _request_context(request: Request) -> Dict[str, Any]:
    client = request.client.host if request.client else "-"
    return {
        "method": request.method,
        "url": str(request.url),
        "client": client,
    }


def _error_body(message: str, code: str = "HTTP_ERROR") -> Dict[str, Any]:
    return {"success": False, "error": message, "code": code, "details": {}}


async def handle_base_api_exception(request, exc):
    ctx = _request_context(request)
    line = f"[BaseAPIException] {ctx['method']} {ctx['url']} from {ctx['client']} -> {exc.status_code}: {exc.message}"
    if exc.status_code >= 500:
        tb_str = "".join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{line}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(line)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


async def handle_http_exception(request, exc):
    ctx = _request_context(request)
    error_msg = f"[HTTPException] {ctx['method']} {ctx['url']} from {ctx['client']} -> {exc.status_code}: {exc.detail}"

    if getattr(exc, "status_code", 500) >= 500:
        tb_str = "".join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{error_msg}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(error_msg)

    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = _error_body(str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request, exc):
    ctx = _request_context(request)
    errors = exc.errors()
    logger.warning(
        f"[ValidationError] {ctx['method']} {ctx['url']} from {ctx['client']} -> 400: {errors}"
    )

    # Surface the first offending field the way handlers phrase their own checks
    message = "Invalid input"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))

    error = ValidationError(
        message, details={"errors": [_jsonable_error(e) for e in errors]}
    )
    return JSONResponse(status_code=error.status_code, content=error.detail)


def _jsonable_error(error: Dict[str, Any]) -> Dict[str, Any]:
    # pydantic v2 puts the raw exception object into ctx for some validators
    return {
        "loc": [str(part) for part in error.get("loc", ())],
        "msg": str(error.get("msg", "")),
        "type": str(error.get("type", "")),
    }


async def handle_unexpected_error(request, exc):
    ctx = _request_context(request)

    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    separator = "=" * 80
    logger.error(
        f"\n{separator}\n"
        f"[Unhandled Error] {ctx['method']} {ctx['url']} from {ctx['client']}\n"
        f"Exception Type: {type(exc).__name__}\n"
        f"Exception Message: {str(exc)}\n\n"
        f"Full Stack Trace:\n{tb_str}"
        f"{separator}"
    )

    internal = InternalServerError(str(exc) or type(exc).__name__)
    return JSONResponse(status_code=internal.status_code, content=internal.detail)
