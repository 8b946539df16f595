"""
Middleware Module
CORS configuration and the catch-all error handler.
"""
