"""
FormBridge - Middleware Package
================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID stored in a ContextVar and echoed in X-Request-ID
    2. Logging: method, path, status and duration of every request but /health
    3. GZip: FastAPI's GZipMiddleware for responses over 500 bytes
    4. CORS: FastAPI's CORSMiddleware (answers OPTIONS preflight)
"""
