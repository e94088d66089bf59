"""Request context middleware: request ids, timing, access log and rate limiting.

One pass per request:
- take ``X-Request-ID`` from the caller or mint one, and expose it to logging
- throttle each client with a token bucket
- time the request and log method, path, status and duration
- echo ``X-Request-ID`` and ``X-Response-Time`` on the response

``check_rate_limit`` is a pure function over a bucket dict; ``RateLimiter``
adds the lock and stale-entry eviction the middleware needs.
"""

import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var
from ..exceptions import ErrorCode

logger = logging.getLogger(__name__)

# Health probes and API docs are never throttled.
_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


def check_rate_limit(
    bucket: dict[str, tuple[float, float]],
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> tuple[bool, float]:
    """Take one token from *key*'s bucket.

    Args:
        bucket: ``{key: (available_tokens, last_refill)}``. Modified in place.
        key: Client identifier.
        max_per_minute: Sustained rate cap; also the burst size. ``<= 0`` disables limiting.
        now: Monotonic timestamp, injectable for tests.

    Returns:
        ``(allowed, retry_after)``; *retry_after* is seconds until the next
        token, 0.0 when allowed.
    """
    if max_per_minute <= 0:
        return True, 0.0
    if now is None:
        now = time.monotonic()

    refill_rate = max_per_minute / 60.0
    tokens, last_refill = bucket.get(key, (float(max_per_minute), now))
    tokens = min(float(max_per_minute), tokens + (now - last_refill) * refill_rate)

    if tokens >= 1.0:
        bucket[key] = (tokens - 1.0, now)
        return True, 0.0

    bucket[key] = (tokens, now)
    return False, (1.0 - tokens) / refill_rate


class RateLimiter:
    """Thread-safe token buckets keyed by client, with periodic eviction so
    rotating client addresses cannot grow memory without bound."""

    def __init__(self, evict_every: int = 100, evict_age: float = 120.0):
        self.buckets: dict[str, tuple[float, float]] = {}
        self.evict_every = evict_every
        self.evict_age = evict_age
        self._calls = 0
        self._lock = threading.Lock()

    def hit(self, key: str, max_per_minute: int, now: Optional[float] = None) -> tuple[bool, float]:
        if now is None:
            now = time.monotonic()
        with self._lock:
            self._calls += 1
            if self._calls % self.evict_every == 0:
                self._evict(now)
            return check_rate_limit(self.buckets, key, max_per_minute, now)

    def _evict(self, now: float) -> None:
        cutoff = now - self.evict_age
        for key in [k for k, (_, ts) in self.buckets.items() if ts < cutoff]:
            del self.buckets[key]

    def reset(self) -> None:
        with self._lock:
            self.buckets.clear()
            self._calls = 0


rate_limiter = RateLimiter()


def client_address(request: Request) -> Optional[str]:
    """Caller address, honouring the first ``X-Forwarded-For`` hop behind a proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


class RequestContextMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.url.path not in _EXEMPT_PATHS:
            key = client_address(request) or "unknown"
            allowed, retry_after = rate_limiter.hit(key, settings.rate_limit_per_minute)
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": ErrorCode.RATE_LIMITED.value,
                        "message": "Too many requests",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
