"""Maps ledger errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scoreboard.errors import ConstraintViolation, StoreUnavailable, UserAlreadyExists, UserNotFound
from scoreboard.logging import get_logger

logger = get_logger(__name__)

STORE_RETRY_AFTER_SECONDS = 1


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(UserNotFound)
    async def user_not_found_handler(_request: Request, exc: UserNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "user not found", "username": exc.username})

    @app.exception_handler(UserAlreadyExists)
    async def user_exists_handler(_request: Request, exc: UserAlreadyExists) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": "user already exists", "username": exc.username})

    @app.exception_handler(ConstraintViolation)
    async def constraint_handler(_request: Request, exc: ConstraintViolation) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
        logger.warning("store_unavailable_response", path=request.url.path, method=request.method)
        return JSONResponse(
            status_code=503,
            content={"detail": "store unavailable, retry later"},
            headers={"Retry-After": str(STORE_RETRY_AFTER_SECONDS)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "internal server error"})
