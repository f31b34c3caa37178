"""
DevCamper API — Security Headers Middleware
============================================

What:  Adds the usual hardening headers to every response.

    X-Content-Type-Options: nosniff
    X-Frame-Options: SAMEORIGIN
    X-DNS-Prefetch-Control: off
    X-Download-Options: noopen
    X-XSS-Protection: 0
    Referrer-Policy: no-referrer
    Strict-Transport-Security: max-age=15552000; includeSubDomains  (production only)

Headers already set by a route are left alone.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
}

HSTS_VALUE = "max-age=15552000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.headers = dict(DEFAULT_HEADERS)
        if hsts:
            self.headers["Strict-Transport-Security"] = HSTS_VALUE

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
