"""Exception handlers — domain errors → HTTP responses.

Learn: Services raise GameGaugeError subclasses and never build
responses. These handlers are the single place where an error class
becomes a status code and a body. Client errors log a warning; anything
unexpected logs the full traceback and returns an opaque 500.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gamegauge.errors import (
    ConflictError,
    GameGaugeError,
    UnexpectedError,
    ValidationError,
)

logger = structlog.get_logger()


def _field_name(loc: tuple) -> str:
    # ("body", "username") → "username"; nested paths keep their dots.
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body/path/query errors from FastAPI, reshaped as a domain ValidationError."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), err.get("msg", "Invalid value"))
    return await validation_error_handler(request, ValidationError(errors))


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("http.validation_failed", fields=sorted(exc.errors))
    return JSONResponse(status_code=exc.status_code, content={"errors": exc.errors})


async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.warning("http.conflict", field=exc.field)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "field": exc.field},
    )


async def unexpected_handler(request: Request, exc: UnexpectedError) -> JSONResponse:
    logger.error("http.unexpected_error", error=exc.message)
    return JSONResponse(status_code=500, content={"detail": UnexpectedError.public_message})


async def domain_error_handler(request: Request, exc: GameGaugeError) -> JSONResponse:
    logger.warning(
        "http.domain_error",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("http.unhandled_exception", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"detail": UnexpectedError.public_message})


def register_exception_handlers(app: FastAPI) -> None:
    """Wire every handler onto the app.

    Starlette picks the most specific class in the MRO, so the subclass
    handlers win over the GameGaugeError catch-all.
    """
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(UnexpectedError, unexpected_handler)
    app.add_exception_handler(GameGaugeError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
