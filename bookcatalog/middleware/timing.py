"""
Request timing middleware
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from bookcatalog.core.logging import log


class TimingMiddleware(BaseHTTPMiddleware):
    """Add request timing to responses"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        log.debug(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(process_time * 1000, 2),
        )
        return response
