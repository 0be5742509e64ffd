import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger("attestgate.http")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "OPTIONS,GET,POST",
}


async def http_boundary_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """Answers preflights, stamps CORS headers and converts stray exceptions to 500s."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_HEADERS)

    try:
        response = await call_next(request)
    except Exception:
        logger.error(
            "unhandled_request_error",
            extra={
                "event_name": "unhandled_request_error",
                "method": request.method,
                "path": request.url.path,
            },
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Internal server error"},
            headers=CORS_HEADERS,
        )

    for name, value in CORS_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
