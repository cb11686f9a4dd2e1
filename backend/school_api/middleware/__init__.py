"""
School API Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request, plus the auth gate.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: records method, path, status and duration
    3. CORS: applied by FastAPI's CORSMiddleware (handles preflight)

The auth gate (middleware/auth.py) is not ASGI middleware. It is a FastAPI
dependency attached to the protected routers, so public routes such as
/auth/register, /auth/login and /health never see it.
"""
