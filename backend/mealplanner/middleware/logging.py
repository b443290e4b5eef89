"""
Meal Planner Backend - Access Log Middleware
============================================

What:  One line on `mealplanner.access` per request.
How:   Times call_next(). The line reads

           POST /upload-cookbook 200 812.4ms [a1b2c3d4] in=5242880B

       `in=` is the declared Content-Length and appears only for requests
       that carry a body, so upload sizes can be compared with
       MAX_UPLOAD_SIZE when chasing 413s. Level: 5xx ERROR, 4xx WARNING,
       otherwise INFO. /health is not logged.

Request bodies are never logged: they carry meal plans and uploaded files.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mealplanner.middleware.request_id import request_id_var

logger = logging.getLogger("mealplanner.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        line = "%s %s %d %.1fms [%s]"
        args = [
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
        ]
        declared = request.headers.get("content-length")
        if declared is not None:
            line += " in=%sB"
            args.append(declared)

        logger.log(level_for_status(response.status_code), line, *args)
        return response
