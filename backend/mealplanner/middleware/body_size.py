"""
Meal Planner Backend - Body Size Limit Middleware
=================================================

What:  Refuses request bodies larger than the upload cap before they are parsed.
How:   Compares the declared Content-Length with MAX_UPLOAD_SIZE plus a fixed
       allowance for multipart framing (boundaries and part headers). Requests
       over the limit get 413 and never reach routing or multipart parsing.

Bodies sent without Content-Length (chunked transfer) pass through here; the
upload route re-checks the buffered file size and raises PayloadTooLargeError.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mealplanner.config import settings

logger = logging.getLogger(__name__)

# Room for multipart boundaries, part headers, and small form fields
MULTIPART_OVERHEAD = 64 * 1024


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests whose Content-Length exceeds the configured cap.

    Args:
        max_body_size: Override (tests). Defaults to
            settings.max_upload_size + MULTIPART_OVERHEAD.
    """

    def __init__(self, app, max_body_size: Optional[int] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.max_body_size = max_body_size or settings.max_upload_size + MULTIPART_OVERHEAD

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                length = int(declared)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={"success": False, "message": "Invalid Content-Length header."},
                )

            if length > self.max_body_size:
                logger.warning(
                    "Rejected %s %s: body of %d bytes exceeds limit of %d",
                    request.method,
                    request.url.path,
                    length,
                    self.max_body_size,
                )
                max_mb = settings.max_upload_size / (1024 * 1024)
                return JSONResponse(
                    status_code=413,
                    content={
                        "success": False,
                        "message": f"File exceeds the maximum upload size of {max_mb:.0f}MB.",
                    },
                    headers={"Connection": "close"},
                )

        return await call_next(request)
