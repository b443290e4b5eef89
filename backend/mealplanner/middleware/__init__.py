"""
Meal Planner Backend - Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Body Size Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Body Size Limit: oversized uploads are refused before parsing
    2. Request ID: correlation ID for logs and the X-Request-ID header
    3. Logging: method, path, status, duration per request
"""
