"""
Wanderlust Backend - Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Access Log] → [Body Limit] → [Bearer Auth] → Route

    1. CORS outermost: preflights are answered and 401/413 responses still
       carry CORS headers, so the browser can read them.
    2. Request ID: correlation ID for every log line below it.
    3. Access Log: sees the final status, including gate rejections.
    4. Body Limit: oversized uploads are refused before authentication work.
    5. Bearer Auth: nothing protected runs without verified claims.
"""
