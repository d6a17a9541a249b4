"""
Mistake Book Backend: Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → [Body Limit] → Route Handler

    1. Request ID: correlation ID for log lines and error bodies
    2. Logging: method, path, status and duration, tagged with the request ID
    3. CORS: Starlette's CORSMiddleware (answers preflight OPTIONS with 200)
    4. Body Limit: 413 for a Content-Length over MAX_BODY_BYTES
"""
