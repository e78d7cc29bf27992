# Middleware package init
"""
Backoffice API: Middleware Package
===================================

Middleware Chain (order matters):
    Request → [Request ID] → [Logging + error trap] → [CORS] → Route Handler

    1. Request ID: correlation ID for log lines and error bodies
    2. Logging: request/response logging, last-resort 500 for unhandled errors
    3. CORS: applied by FastAPI's CORSMiddleware (handles preflight)
"""
