import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (reusing the caller's X-Request-ID) and logs its outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as exc:
            context["duration_ms"] = _elapsed_ms(started)
            logger.error(f"[{request_id}] {request.method} {request.url.path} failed: {exc}", extra=context)
            raise

        context.update(status_code=response.status_code, duration_ms=_elapsed_ms(started))
        if response.status_code >= 400:
            level = logging.WARNING
        elif context["duration_ms"] > SLOW_REQUEST_MS:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(
            level,
            f"[{request_id}] {request.method} {request.url.path} - {response.status_code} ({context['duration_ms']}ms)",
            extra=context,
        )

        response.headers["X-Request-ID"] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
