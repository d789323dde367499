import logging

from fastapi import FastAPI, HTTPException, Request, status as http_status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from placement_api.services.errors import ErrorKind, RepositoryError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: http_status.HTTP_409_CONFLICT,
    ErrorKind.REFERENTIAL_VIOLATION: http_status.HTTP_400_BAD_REQUEST,
    ErrorKind.BUSINESS_RULE_VIOLATION: http_status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: http_status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: http_status.HTTP_403_FORBIDDEN,
    ErrorKind.UNAVAILABLE: http_status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.INTERNAL: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(exc: RepositoryError) -> HTTPException:
    status_code = STATUS_BY_KIND.get(exc.kind, http_status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code == http_status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("repository error kind=%s: %s", exc.kind.value, exc.message, exc_info=exc)
        return HTTPException(status_code=status_code, detail=INTERNAL_ERROR_MESSAGE)
    return HTTPException(status_code=status_code, detail=exc.message)


def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    names = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(names) if names else "body"
    message = str(first.get("msg", "invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, ") :]
    return f"{field}: {message}"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = validation_message(exc)
        logger.info("validation failed method=%s path=%s %s", request.method, request.url.path, message)
        return JSONResponse(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": message},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled exception method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": INTERNAL_ERROR_MESSAGE},
        )
