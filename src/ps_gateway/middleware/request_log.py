"""Per-request access log for the market API.

A client-supplied X-Request-ID is kept (truncated) so a trade can be traced
from the caller through the settlement log lines; otherwise one is minted.
It lands on request.state for the ApiResponse envelope and is echoed back
in the response header.

    INFO  [POST] /api/v1/trades -> 200 (4ms) req_a1b2c3d4e5f6
    WARN  [GET] /api/v1/leaderboard/season -> 200 (812ms) req_... slow
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.ps_common.response import new_request_id

logger = logging.getLogger("ps.request")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64
SLOW_REQUEST_MS = 500.0
QUIET_PATHS = frozenset({"/health"})


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request_id = incoming[:MAX_REQUEST_ID_LENGTH] or new_request_id()
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if elapsed_ms >= SLOW_REQUEST_MS:
            level = logging.WARNING
        elif request.url.path in QUIET_PATHS:
            level = logging.DEBUG
        else:
            level = logging.INFO
        logger.log(
            level,
            "[%s] %s -> %d (%.0fms) %s%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
            " slow" if level == logging.WARNING else "",
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
