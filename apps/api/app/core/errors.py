import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.http import CORS_HEADERS

logger = logging.getLogger("attestgate.errors")


class GatewayError(Exception):
    """Base for errors that map onto an ``{ok: false, error}`` response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedPayload(GatewayError):
    status_code = 400
    default_message = "Invalid image data"


class BackendUnavailable(GatewayError):
    default_message = "Attestation backend is unavailable"


class InvocationFailure(GatewayError):
    default_message = "Signing failed"


class ArtifactMissing(GatewayError):
    default_message = "Signing tool reported success but produced no artifact"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message},
        headers=CORS_HEADERS,
    )


async def _gateway_error_handler(_: Request, exc: GatewayError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.info("invalid_request_body", extra={"event_name": "invalid_request_body"})
    return error_response(400, "Invalid request body")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, _gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
