"""Per-grower request throttling for the model-backed endpoints.

Seed analysis and support email both cost money per call, so they share one
sliding-window budget stored in Upstash Redis. Signed-in growers are counted
by user id; anonymous callers by client address. When Upstash is not
configured, or the store cannot be reached, requests are let through.
"""

from __future__ import annotations

import time
import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from upstash_ratelimit import Ratelimit, SlidingWindow
from upstash_redis import Redis

from core.config import Settings, get_settings
from core.error_handler import StructuredLogger


logger = StructuredLogger(__name__)

RATE_LIMIT_PREFIX = "genetics-library:ratelimit"
EXEMPT_PATHS: frozenset[str] = frozenset({"/api/v1/health", "/health"})
TOO_MANY_REQUESTS = "Too many requests. Please try again later."


def build_ratelimiter(settings: Settings) -> Ratelimit | None:
    """Sliding-window limiter for ``settings``, or None when Upstash is unset."""
    if not (settings.UPSTASH_REDIS_REST_URL and settings.UPSTASH_REDIS_REST_TOKEN):
        logger.warning("Upstash Redis not configured, request throttling disabled")
        return None
    try:
        limiter = Ratelimit(
            redis=Redis(
                url=settings.UPSTASH_REDIS_REST_URL,
                token=settings.UPSTASH_REDIS_REST_TOKEN,
            ),
            limiter=SlidingWindow(
                max_requests=settings.RATE_LIMIT_REQUESTS,
                window=settings.RATE_LIMIT_WINDOW_SECONDS,
            ),
            prefix=RATE_LIMIT_PREFIX,
        )
    except Exception as exc:
        logger.error("Could not create request throttle", error=str(exc))
        return None
    logger.info(
        "Request throttling enabled",
        max_requests=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    return limiter


@lru_cache
def get_ratelimiter() -> Ratelimit | None:
    return build_ratelimiter(get_settings())


def rate_limit_bucket(request: Request) -> str:
    """Name of the budget this request draws from.

    ``get_current_user`` runs first on protected routes and leaves the user id
    on ``request.state``. The first ``X-Forwarded-For`` hop is the caller when
    the API sits behind the proxy.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return f"ip:{forwarded}"
    if request.client and request.client.host:
        return f"ip:{request.client.host}"
    # Unidentifiable callers must not share one bucket
    return f"anon:{uuid.uuid4()}"


def retry_after_seconds(reset_ms: float, now_ms: float | None = None) -> int:
    """Whole seconds until the window resets, never less than one."""
    if now_ms is None:
        now_ms = time.time() * 1000
    return max(1, int(reset_ms - now_ms) // 1000)


def _is_exempt(path: str) -> bool:
    return path.rstrip("/") in EXEMPT_PATHS


async def check_rate_limit(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Route dependency that answers 429 once a bucket is spent.

    Raises:
        HTTPException: 429 with ``Retry-After`` and ``X-RateLimit-*`` headers.
    """
    if _is_exempt(request.url.path):
        return
    limiter = get_ratelimiter()
    if limiter is None:
        return

    bucket = rate_limit_bucket(request)
    try:
        verdict = limiter.limit(bucket)
    except Exception as exc:
        logger.error(
            "Request throttle unavailable, allowing request",
            path=request.url.path,
            error=str(exc),
        )
        return
    if verdict.allowed:
        return

    retry_after = retry_after_seconds(verdict.reset)
    logger.warning(
        "Request throttled",
        bucket=bucket,
        path=request.url.path,
        retry_after=retry_after,
    )
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=TOO_MANY_REQUESTS,
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(settings.RATE_LIMIT_REQUESTS),
            "X-RateLimit-Remaining": str(verdict.remaining),
        },
    )
