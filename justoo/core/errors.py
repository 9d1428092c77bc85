from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from justoo.core.logger import get_logger

logger = get_logger(__name__)


class AuthError(HTTPException):
    """HTTP-facing failure identified by a stable error code."""

    def __init__(self, status_code: int, code: str):
        super().__init__(status_code=status_code, detail=code)
        self.code = code


def create_error_response(code: str) -> dict:
    return {"error": code}


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc.code))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=create_error_response("INTERNAL_ERROR"))
