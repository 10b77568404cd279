"""
Rate Limiting Middleware
Limits login attempts and write traffic on the ledger endpoints
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from collections import defaultdict, deque
from datetime import datetime, timedelta
from typing import Dict, Tuple, Optional
import threading
import logging

from tourdesk.core.config import settings

logger = logging.getLogger(__name__)

# path prefix -> (max requests, window seconds)
DEFAULT_LIMITS: Dict[str, Tuple[int, int]] = {
    '/api/v1/auth/login': (5, 60),
    '/api/v1/auth/change-password': (3, 300),
    '/api/v1/receipts': (30, 60),
    '/api/v1/payments': (30, 60),
    '/api/v1/tds': (30, 60),
    '/api/v1/sales': (30, 60),
    '/api/v1/purchases': (30, 60),
    '/api/v1/expenses': (30, 60),
    '/api/v1/incomes': (30, 60),
    '/api/v1/banking/transfers': (10, 60),
    'default': (100, 60),
}

UNCOUNTED_METHODS = ('GET', 'HEAD', 'OPTIONS')


def client_key(request: Request) -> str:
    """Forwarded or peer address plus the first characters of the bearer token"""
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    address = forwarded or request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")

    token = request.headers.get("Authorization", "").removeprefix("Bearer ")
    holder = token[:8] if len(token) > 8 else "anonymous"
    return f"{address}:{holder}"


class RateLimiter:
    """
    Sliding window counters kept in process memory.
    Each worker process limits on its own.
    """

    def __init__(self, limits: Optional[Dict[str, Tuple[int, int]]] = None):
        self.limits = limits or dict(DEFAULT_LIMITS)
        self._hits: Dict[str, deque] = defaultdict(deque)
        self._lock = threading.Lock()

    def limit_for(self, path: str) -> Tuple[int, int]:
        """Longest configured prefix wins"""
        prefixes = [p for p in self.limits if p != 'default' and path.startswith(p)]
        if not prefixes:
            return self.limits['default']
        return self.limits[max(prefixes, key=len)]

    def check(self, path: str, method: str, client: str,
              now: Optional[datetime] = None) -> Tuple[bool, Optional[Dict]]:
        """
        Count one request and report whether it may proceed.
        Returns (allowed, info) where info feeds the X-RateLimit headers;
        reads outside /api/v1/auth are not counted and get no info.
        """
        if method in UNCOUNTED_METHODS and not path.startswith('/api/v1/auth'):
            return True, None

        now = now or datetime.utcnow()
        limit, window = self.limit_for(path)
        key = f"{path}:{client}"

        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - timedelta(seconds=window):
                hits.popleft()

            if len(hits) >= limit:
                retry_after = int((hits[0] + timedelta(seconds=window) - now).total_seconds())
                logger.warning(f"Rate limit exceeded for {key}: {len(hits)}/{limit} requests")
                return False, {
                    'limit': limit,
                    'remaining': 0,
                    'reset': retry_after,
                    'retry_after': max(1, retry_after)
                }

            hits.append(now)
            return True, {'limit': limit, 'remaining': limit - len(hits), 'reset': window}

    def is_allowed(self, request: Request) -> Tuple[bool, Optional[Dict]]:
        return self.check(request.url.path, request.method, client_key(request))

    def reset(self):
        with self._lock:
            self._hits.clear()


def _limit_headers(info: Dict) -> Dict[str, str]:
    return {
        'X-RateLimit-Limit': str(info['limit']),
        'X-RateLimit-Remaining': str(info['remaining']),
        'X-RateLimit-Reset': str(info['reset']),
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answers 429 once a client goes over the limit for an /api/ path"""

    def __init__(self, app):
        super().__init__(app)
        self.rate_limiter = RateLimiter()

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED or not request.url.path.startswith('/api/'):
            return await call_next(request)

        allowed, info = self.rate_limiter.is_allowed(request)
        if not allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'detail': 'Too many requests. Please try again later.',
                    'retry_after': info['retry_after']
                },
                headers={'Retry-After': str(info['retry_after']), **_limit_headers(info)}
            )

        response = await call_next(request)
        if info:
            response.headers.update(_limit_headers(info))
        return response
