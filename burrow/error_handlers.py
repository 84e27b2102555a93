import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from .errors import AppError, VerificationRequiredError

logger = logging.getLogger(__name__)


def error_body(exc: AppError) -> dict:
    body = {"error": exc.code, "message": exc.message}
    if isinstance(exc, VerificationRequiredError) and exc.email:
        body["email"] = exc.email
    return body


def init_error_handlers(app):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, "%s %s -> %s(code=%s): %s", request.method, request.url.path,
                   exc.__class__.__name__, exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=422,
            content={"error": "VALIDATION_ERROR", "message": "Invalid request", "details": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic puts the raw exception in ctx for value errors
    return [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
