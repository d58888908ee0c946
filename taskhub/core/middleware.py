"""
ASGI middleware: request logging and request timeout.
"""
import asyncio
import json
import logging
import time
from typing import Callable

from fastapi import Request

logger = logging.getLogger(__name__)

QUIET_PATHS = ("/health",)


async def request_logging_middleware(request: Request, call_next):
    """Log all requests with timing"""
    start_time = time.time()

    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if request.url.path not in QUIET_PATHS:
        client = request.client.host if request.client else "-"
        logger.info(
            f"{request.method} {request.url.path} - {client} - {response.status_code} ({process_time:.3f}s)"
        )

    return response


def TimeoutMiddleware(app: Callable, timeout_seconds: int) -> Callable:
    """Cancel the request after timeout_seconds and answer 504. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        try:
            await asyncio.wait_for(app(scope, receive, send), timeout=float(timeout_seconds))
        except asyncio.TimeoutError:
            logger.warning(
                f"Request timed out after {timeout_seconds} seconds: {scope.get('method', '')} {scope.get('path', '')}"
            )
            body = json.dumps({
                "error": "GATEWAY_TIMEOUT",
                "message": f"Request timed out after {timeout_seconds} seconds",
            }).encode()
            await send({
                "type": "http.response.start",
                "status": 504,
                "headers": [(b"content-type", b"application/json")],
            })
            await send({"type": "http.response.body", "body": body, "more_body": False})

    return asgi_app
