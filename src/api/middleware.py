"""
API Middleware.

Request ID injection with structured access logging, and per-IP rate
limiting of the endpoints that call paid hosted AI models.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.logging_config import get_logger, trace_id_var, generate_trace_id

logger = get_logger(__name__)

# In-memory sliding window; per process only
_rate_counts: dict[str, list[float]] = defaultdict(list)
RATE_LIMIT_WINDOW = 60  # seconds
RATE_LIMIT_MAX = 20     # AI requests per window per IP
RATE_LIMITED_PATHS = ("/transcribe", "/extract")


def _prune_stale(now: float) -> None:
    """Drop expired timestamps, and the IPs left with none."""
    for client_ip in list(_rate_counts):
        recent = [t for t in _rate_counts[client_ip] if now - t < RATE_LIMIT_WINDOW]
        if recent:
            _rate_counts[client_ip] = recent
        else:
            del _rate_counts[client_ip]


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Inject a unique request ID into every request and response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_trace_id()
        token = trace_id_var.set(request_id)

        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            trace_id_var.reset(token)

        elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = str(elapsed_ms)

        logger.info(
            "api_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            elapsed_ms=elapsed_ms,
            request_id=request_id,
        )

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limiter for transcription and extraction calls."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path not in RATE_LIMITED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        _prune_stale(now)

        if len(_rate_counts[client_ip]) >= RATE_LIMIT_MAX:
            logger.warning("rate_limit_exceeded", client_ip=client_ip, path=request.url.path)
            return Response(
                content='{"detail": "rate_limit_exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(RATE_LIMIT_WINDOW)},
            )

        _rate_counts[client_ip].append(now)
        return await call_next(request)
