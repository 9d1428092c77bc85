import logging
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from justoo.core.logger import logger

class LogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Method: {request.method} | Path: {request.url.path} | "
                f"Status: 500 | Duration: {time.perf_counter() - start_time:.4f}s"
            )
            raise

        process_time = time.perf_counter() - start_time
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        client = request.client.host if request.client else "-"
        logger.log(
            level,
            f"Method: {request.method} | "
            f"Path: {request.url.path} | "
            f"Client: {client} | "
            f"Status: {response.status_code} | "
            f"Duration: {process_time:.4f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
