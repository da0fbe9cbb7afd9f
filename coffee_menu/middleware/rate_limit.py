from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from coffee_menu.core.config import (
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    TRUST_FORWARDED_FOR,
)
from coffee_menu.core.rate_limiter import RateLimiterService, SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


class ClientRateLimitMiddleware(BaseHTTPMiddleware):
    """Throttle requests per client address; over the limit answers 429."""

    def __init__(
        self,
        app,
        *,
        rate_limiter: RateLimiterService | None = None,
        enabled: bool = RATE_LIMIT_ENABLED,
        trust_forwarded_for: bool = TRUST_FORWARDED_FOR,
    ) -> None:
        super().__init__(app)
        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            limit=RATE_LIMIT_REQUESTS,
            window_seconds=RATE_LIMIT_WINDOW_SECONDS,
        )
        self._enabled = enabled
        self._trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next):
        if not self._enabled:
            return await call_next(request)

        client_key = client_address(request, trust_forwarded_for=self._trust_forwarded_for)
        decision = self._rate_limiter.check(client_key)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded: client=%s endpoint=%s %s",
                client_key,
                request.method,
                request.url.path,
            )
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests"},
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": str(decision.remaining),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


def client_address(request: Request, trust_forwarded_for: bool = False) -> str:
    if trust_forwarded_for:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
        real_ip = (request.headers.get("x-real-ip") or "").strip()
        if real_ip:
            return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
