"""
Rate limiting middleware for the movie catalog API
Fixed-window request ceiling per client IP, kept in process memory
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from collections import OrderedDict
import time
from typing import Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

MAX_TRACKED_CLIENTS = 10000


class FixedWindowRateLimiter:
    """
    Counts requests per key within consecutive fixed windows.

    At most max_tracked keys are held. Windows are kept in start order, so
    when the map is full the window that began earliest is evicted.
    """

    def __init__(self, max_requests: int, window_seconds: int, max_tracked: int = MAX_TRACKED_CLIENTS):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_tracked = max_tracked
        self.windows: "OrderedDict[str, Tuple[int, float]]" = OrderedDict()  # key: (count, window_reset_at)

    def hit(self, key: str, now: float = None) -> Tuple[bool, int, float]:
        """
        Record one request for key.

        Returns:
            (allowed, remaining, reset_at)
        """
        now = time.time() if now is None else now
        current = self.windows.get(key)

        if current is None or now >= current[1]:
            self.windows.pop(key, None)
            self._make_room(now)
            count, reset_at = 0, now + self.window_seconds
        else:
            count, reset_at = current

        count += 1
        self.windows[key] = (count, reset_at)

        remaining = max(0, self.max_requests - count)
        return count <= self.max_requests, remaining, reset_at

    def cleanup_expired(self, now: float = None):
        """Drop windows that have already ended"""
        now = time.time() if now is None else now
        expired = [key for key, (_, reset_at) in self.windows.items() if now >= reset_at]
        for key in expired:
            del self.windows[key]

    def _make_room(self, now: float):
        if len(self.windows) < self.max_tracked:
            return
        self.cleanup_expired(now)
        while len(self.windows) >= self.max_tracked:
            evicted, _ = self.windows.popitem(last=False)
            logger.debug(f"Rate limit table full, evicting window for {evicted}")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject requests beyond the configured ceiling with 429.

    Clients are keyed on the socket peer address. X-Forwarded-For is only
    consulted when trust_proxy is set, i.e. when a proxy in front of the
    app overwrites that header.
    """

    def __init__(self, app, max_requests: int = 100, window_seconds: int = 3600,
                 bypass_prefixes: Sequence[str] = ("/health",), trust_proxy: bool = False,
                 max_tracked: int = MAX_TRACKED_CLIENTS):
        super().__init__(app)
        self.limiter = FixedWindowRateLimiter(max_requests, window_seconds, max_tracked)
        self.bypass_prefixes = tuple(bypass_prefixes)
        self.trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.bypass_prefixes):
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        now = time.time()
        allowed, remaining, reset_at = self.limiter.hit(client_ip, now)
        headers = {
            "X-RateLimit-Limit": str(self.limiter.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(int(reset_at)),
        }

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_ip}")
            headers["Retry-After"] = str(max(1, int(reset_at - now)))
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later."},
                headers=headers,
            )

        response = await call_next(request)
        for name, value in headers.items():
            response.headers[name] = value
        return response

    def _get_client_ip(self, request: Request) -> str:
        if self.trust_proxy:
            forwarded = request.headers.get("x-forwarded-for")
            if forwarded:
                return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"
