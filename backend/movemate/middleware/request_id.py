"""
MoveMate Backend — Request ID Middleware
=========================================

What:  Tags each request with a short correlation ID and echoes it back in
       the X-Request-ID response header.
How:   Reuses a client-supplied X-Request-ID, otherwise generates one. The ID
       is stored in a ContextVar (read by the access log and the exception
       handlers) and on request.state.

Every error body returned by the API carries the same `request_id`, so a
client can quote it and support can find the matching log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
