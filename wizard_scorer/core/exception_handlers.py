"""
Exception handlers for the Wizard scorer API.
"""
import logging
from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wizard_scorer.core.config import settings
from wizard_scorer.core.exceptions import (
    WizardException, NotFound, GameValidationError, PersistenceError
)

logger = logging.getLogger(__name__)


def create_error_response(status_code: int, detail: str, error_code: str, request: Request) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "error_code": error_code,
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    """Handle game, round and player lookups that did not resolve."""
    return create_error_response(404, str(exc), exc.error_code, request)


async def game_validation_handler(request: Request, exc: GameValidationError) -> JSONResponse:
    """Handle input that breaks a game rule."""
    return create_error_response(400, str(exc), exc.error_code, request)


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Handle database write failures."""
    logger.error(f"Persistence failure: {exc}")
    return create_error_response(500, str(exc), exc.error_code, request)


async def wizard_exception_handler(request: Request, exc: WizardException) -> JSONResponse:
    """Handle generic scoring exceptions."""
    return create_error_response(400, str(exc), exc.error_code, request)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors with better formatting."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(x) for x in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": errors,
            "error_code": "VALIDATION_ERROR",
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    return create_error_response(exc.status_code, exc.detail, f"HTTP_{exc.status_code}", request)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Don't expose internal errors in production
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "An unexpected error occurred"

    return create_error_response(500, detail, "INTERNAL_ERROR", request)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(GameValidationError, game_validation_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(WizardException, wizard_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
