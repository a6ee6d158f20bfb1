"""
Rate Limiting Package

Sliding-window admission control for the inbound request path.
"""

from .rate_limiter import RateLimiter, RateLimitDecision, RateLimitEntry

__all__ = [
    "RateLimiter",
    "RateLimitDecision",
    "RateLimitEntry",
]
