"""
Users API: Middleware Package
==============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → [Unhandled Error] → Route Handler

    1. Rate Limit: rejects abusive clients with a 429 envelope before any work
    2. Request ID: correlation id for logs and the X-Request-ID header
    3. Logging: one access line per request, with status and duration
    4. CORS: FastAPI's CORSMiddleware (handles preflight)
    5. Unhandled Error: renders escaped exceptions as a 500 envelope, inside
       the chain so the response keeps its request id, log line and CORS headers
"""
