"""
MoveMate Backend — Decision Rate Limiting Middleware
=====================================================

What:  Per-IP sliding window limiter for the estimate decision endpoints.
Why:   Accept / reject / update are the only writes in this service. Listing
       endpoints stay unthrottled.
How:   Only requests whose method is POST or PATCH and whose path starts
       with /api/requests/driver/estimate are counted. Every other request
       passes straight through.

Algorithm: Sliding Window Log
    1. Each IP keeps the timestamps of its counted requests
    2. On each counted request, drop timestamps older than the window
    3. If the remaining count >= limit, reply 429 with Retry-After
    4. Otherwise record the timestamp and continue

State is per process. Running several workers multiplies the effective
limit by the worker count.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from movemate.config import settings
from movemate.exceptions import RateLimitExceededError
from movemate.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

DECISION_PATH_PREFIX = "/api/requests/driver/estimate"
DECISION_METHODS = frozenset({"POST", "PATCH"})

# Inactive IPs are swept after this many counted requests.
CLEANUP_INTERVAL = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limiter.

    Limits default to DECISION_RATE_LIMIT_REQUESTS per
    DECISION_RATE_LIMIT_WINDOW seconds and can be overridden per app
    (tests mount it with a tiny limit).
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        path_prefix: str = DECISION_PATH_PREFIX,
        methods: FrozenSet[str] = DECISION_METHODS,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.decision_rate_limit_requests
        self.window_seconds = window_seconds or settings.decision_rate_limit_window
        self.path_prefix = path_prefix
        self.methods = methods
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._counted = 0

    def is_limited(self, request: Request) -> bool:
        return request.method in self.methods and request.url.path.startswith(
            self.path_prefix
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_limited(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        window_start = now - self.window_seconds

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Decision rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                self.window_seconds,
            )
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": error.message,
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get("") or None,
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._counted += 1
        if self._counted % CLEANUP_INTERVAL == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip
            for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
