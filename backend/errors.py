# errors.py — Error rendering for the Kanban API
# Every error body is {"error": "<message>"} plus the request id.
import logging
from contextlib import contextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("kanban-api.errors")


@contextmanager
def storage_errors(action: str):
    """Turn a database failure into a logged HTTP 500 "Failed to <action>"."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to {action}") from e


def _error_response(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    content = {"error": message, **extra}
    content["request_id"] = getattr(request.state, "request_id", None)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = _error_response(request, exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Sanitise errors to ensure JSON serialisability
        errors = []
        for err in exc.errors():
            errors.append({
                "type": str(err.get("type", "unknown")),
                "loc": [str(part) for part in err.get("loc", [])],
                "msg": str(err.get("msg", "")),
            })
        return _error_response(request, 422, "Request validation failed", details=errors)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error_response(request, 500, "Internal server error")
