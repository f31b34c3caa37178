"""
DevCamper API — Middleware Package
===================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [Security Headers]
            → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: abusive clients are rejected before any work
    2. Request ID: correlation id for every log line and the response header
    3. Logging: method, path, status and duration per request
    4. Security Headers: hardening headers on every response
"""
