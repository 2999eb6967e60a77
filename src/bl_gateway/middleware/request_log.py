"""Request logging middleware.

One log line per HTTP request: method, path, status, latency and a request id.
A caller-supplied X-Request-ID is kept (so a wallet frontend can correlate its
own logs); otherwise a short id is minted. The id lands in request.state for
ApiResponse and is echoed back in the X-Request-ID response header.

    INFO [POST] /api/v1/bets → 201 (12ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("blink.request")

REQUEST_ID_HEADER = "X-Request-ID"
_QUIET_PATHS = frozenset({"/health"})
_CLIENT_ID_RE = re.compile(r"[A-Za-z0-9_.-]{1,64}")


def _request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "")
    if _CLIENT_ID_RE.fullmatch(supplied):
        return supplied
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if response.status_code >= 500:
            level = logging.WARNING
        elif request.url.path in _QUIET_PATHS:
            level = logging.DEBUG  # load-balancer probes
        else:
            level = logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
