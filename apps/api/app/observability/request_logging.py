import logging
from time import perf_counter

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger("attestgate.http.access")

# Health probes are polled often and add nothing to the access log.
_QUIET_PATHS = frozenset({"/health", "/api/health"})


def _log_request(request: Request, status: int, started: float) -> None:
    if request.url.path in _QUIET_PATHS and status < 400:
        return
    level = logging.WARNING if status >= 500 else logging.INFO
    logger.log(
        level,
        "http_request",
        extra={
            "event_name": "http_request",
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "latency_ms": round((perf_counter() - started) * 1000, 2),
        },
    )


async def request_logging_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    started = perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        _log_request(request, 500, started)
        raise

    _log_request(request, response.status_code, started)
    return response
