"""Domain errors and the exception handlers that turn them into responses."""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from monteerly.core.logging import get_logger

logger = get_logger(__name__)


class StudioError(Exception):
    """Base class for every error raised by the studio domain."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotAuthenticated(StudioError):
    """An operation needs a session and none is active."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class AuthError(StudioError):
    """Sign-up, sign-in or federated sign-in was refused.

    The reason is user-facing and shown verbatim.
    """

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SyncError(StudioError):
    """A live subscription failed. Terminal for that subscription."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class IllegalTransition(StudioError):
    """A status change outside the transition table."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move from '{current}' to '{target}'")
        self.current = current
        self.target = target


class ValidationError(StudioError):
    """Submitted fields failed validation before reaching the store."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = errors


class NotFound(StudioError):
    """No document with that id in the collection (or not visible to the caller)."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, collection: str, document_id: str) -> None:
        super().__init__(f"{collection}/{document_id} not found")
        self.collection = collection
        self.document_id = document_id


class StoreError(StudioError):
    """The document store could not complete a request."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def _error_body(exc: StudioError) -> dict[str, Any]:
    body: dict[str, Any] = {
        "detail": exc.message,
        "error": type(exc).__name__,
        "request_id": correlation_id.get(),
    }
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    return body


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StudioError)
    async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(
                "Request failed",
                error=type(exc).__name__,
                detail=exc.message,
                path=request.url.path,
            )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthenticated) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc),
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
