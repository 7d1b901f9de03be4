"""
Middleware package for request processing
"""
from .rate_limit import RateLimitMiddleware, FixedWindowRateLimiter

__all__ = [
    "RateLimitMiddleware",
    "FixedWindowRateLimiter"
]
