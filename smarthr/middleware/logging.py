import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from smarthr.core.request_context import get_request_context

logger = logging.getLogger("access")

class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        ctx = get_request_context(request)

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Client: {ctx['ip_address'] or 'unknown'} - "
            f"User-Agent: {ctx['user_agent'] or 'unknown'}"
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        response.headers["X-Process-Time"] = str(process_time)
        if ctx.get("request_id"):
            response.headers["X-Request-ID"] = ctx["request_id"]

        return response
