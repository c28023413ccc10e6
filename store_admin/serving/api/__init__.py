"""
REST API Module
"""
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
