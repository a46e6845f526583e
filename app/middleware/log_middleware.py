import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.logger import logger

class LogMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and reports the handling time back to the caller."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        query = f"?{request.url.query}" if request.url.query else ""
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path}{query} | "
            f"Status: {response.status_code} | "
            f"Duration: {elapsed:.4f}s"
        )

        return response
