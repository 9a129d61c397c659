"""
Request logging middleware.
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from utils.logger import get_logger

logger = get_logger("http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration of every /api request.
    """

    LOGGED_PREFIX = "/api"

    async def dispatch(self, request: Request, call_next):
        """
        Time the request and log the outcome at a level matching its status.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response from next handler
        """
        if not request.url.path.startswith(self.LOGGED_PREFIX):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - started) * 1000)

        message = f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms"
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        return response
