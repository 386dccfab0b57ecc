"""
Request Logging Middleware

Logs every API request with method, path, status and latency.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("requests")

# Paths to skip (health checks, static assets)
SKIP_PATHS = {"/health", "/favicon.ico"}


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Logs every API request with timing, company and response status."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path

        if path in SKIP_PATHS:
            return await call_next(request)

        start = time.monotonic()
        response: Response | None = None
        error: str | None = None

        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            error = str(exc)
            raise
        finally:
            latency_ms = (time.monotonic() - start) * 1000
            status_code = response.status_code if response else 500

            log_data = {
                "method": request.method,
                "path": path,
                "query": str(request.url.query),
                "status": status_code,
                "latency_ms": round(latency_ms, 2),
                "company_id": request.path_params.get("company_id"),
            }

            if error:
                log_data["error"] = error

            if status_code >= 500:
                logger.error("api_request", extra=log_data)
            elif status_code >= 400:
                logger.warning("api_request", extra=log_data)
            else:
                logger.info("api_request", extra=log_data)
