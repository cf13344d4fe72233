"""Per-client token-bucket rate limiting and CORS headers for aiohttp handlers."""

import functools
import json
import threading
import time
from dataclasses import dataclass

from aiohttp import web

from .response import Code, message

IDLE_TIMEOUT = 600.0


@dataclass(frozen=True)
class RateLimiterConfig:
    """Bucket size, the window it refills over, and how often idle clients are dropped.

    Times are in seconds.
    """

    max_requests: int
    window: float
    cleanup_interval: float

    def __post_init__(self):
        if self.max_requests <= 0:
            raise ValueError("max_requests must be positive")


STRICT_CONFIG = RateLimiterConfig(max_requests=5, window=60.0, cleanup_interval=300.0)
MODERATE_CONFIG = RateLimiterConfig(max_requests=30, window=60.0, cleanup_interval=600.0)
LENIENT_CONFIG = RateLimiterConfig(max_requests=100, window=60.0, cleanup_interval=900.0)


@dataclass
class _Bucket:
    tokens: int
    last_refill: float
    last_request: float


class RateLimiter:
    """Token bucket per client id; idle clients are forgotten periodically."""

    def __init__(self, config, clock=time.monotonic):
        self.config = config
        self._clock = clock
        self._refill_interval = config.window / config.max_requests
        self._clients = {}
        self._lock = threading.Lock()
        self._last_cleanup = None

    def __len__(self):
        with self._lock:
            return len(self._clients)

    def is_allowed(self, client_id, now=None):
        """Take a token for ``client_id``; return False when none is left."""
        now = self._clock() if now is None else now
        with self._lock:
            if self._last_cleanup is None:
                self._last_cleanup = now
            elif now - self._last_cleanup >= self.config.cleanup_interval:
                self._drop_idle(now)
                self._last_cleanup = now

            bucket = self._clients.get(client_id)
            if bucket is None:
                self._clients[client_id] = _Bucket(self.config.max_requests - 1, now, now)
                return True

            bucket.last_request = now
            refill = int((now - bucket.last_refill) // self._refill_interval)
            if refill > 0:
                bucket.tokens = min(self.config.max_requests, bucket.tokens + refill)
                bucket.last_refill = now

            if bucket.tokens > 0:
                bucket.tokens -= 1
                return True
            return False

    def cleanup(self, now=None):
        """Forget clients idle for over ten minutes; return how many were dropped."""
        now = self._clock() if now is None else now
        with self._lock:
            return self._drop_idle(now)

    def _drop_idle(self, now):
        idle = [key for key, b in self._clients.items() if now - b.last_request > IDLE_TIMEOUT]
        for key in idle:
            del self._clients[key]
        return len(idle)


def client_id(request):
    """Identify a client by IP (X-Real-IP, X-Forwarded-For, peer), mac and User-ID."""
    ident = request.headers.get("X-Real-IP", "")
    if not ident:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded:
            ident = forwarded.split(",")[0].strip()
    if not ident:
        ident = request.remote or ""

    mac = request.query.get("mac", "")
    if mac:
        ident = f"{ident}:{mac}"
    user = request.headers.get("User-ID", "")
    if user:
        ident = f"{ident}:{user}"
    return ident


def _dumps(data):
    return json.dumps(data, ensure_ascii=False)


def rate_limit_middleware(config):
    """Return a decorator that rate-limits an aiohttp handler with its own limiter."""
    limiter = RateLimiter(config)

    def decorate(handler):
        @functools.wraps(handler)
        async def wrapper(request):
            if not limiter.is_allowed(client_id(request)):
                body = {
                    "code": int(Code.EXCEED_RATE_LIMIT),
                    "msg": message(Code.EXCEED_RATE_LIMIT),
                }
                return web.json_response(body, dumps=_dumps)
            return await handler(request)

        return wrapper

    return decorate


def _add_cors_headers(headers):
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "*"
    headers.add("Access-Control-Allow-Headers", "Content-Type")
    headers.add("Access-Control-Allow-Headers", "Authorization")


def cors(handler):
    """Wrap an aiohttp handler so its responses allow any origin."""

    @functools.wraps(handler)
    async def wrapper(request):
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            _add_cors_headers(exc.headers)
            raise
        _add_cors_headers(response.headers)
        return response

    return wrapper