"""
MoveMate Backend — Middleware Package
======================================

Middleware Chain (outermost first, as registered in main.create_app):
    Request → [Request ID] → [Access Log] → [Rate Limit] → [GZip] → [CORS] → Route

    1. Request ID first, so the access log and 429 bodies can read it
    2. Access log sees every response, including rate-limited ones
    3. Rate limit only counts decision writes (see rate_limit.py)
"""

from movemate.middleware.logging import RequestLoggingMiddleware
from movemate.middleware.rate_limit import RateLimitMiddleware
from movemate.middleware.request_id import RequestIDMiddleware, request_id_var

__all__ = [
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "request_id_var",
]
