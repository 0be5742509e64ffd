from collections.abc import Callable
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

OPENAPI_TAGS_METADATA = [
    {
        "name": "health",
        "description": "Liveness check for the gateway process.",
    },
    {
        "name": "attestation",
        "description": "Sign images with a provenance manifest and verify existing manifests.",
    },
]

API_DESCRIPTION = """
## Attestgate API

Local gateway around `c2patool`. Images are sent as JSON, either as a data URI or
as bare base64, and run through the tool on the host or inside a Docker sandbox.

### Error format
Failures are returned as:

```json
{"ok": false, "error": "Human readable message"}
```

A failed verification is not an error: `POST /api/verify` answers 200 with
`ok: false` and the tool output.
"""


def _error_example(description: str, message: str) -> dict[str, Any]:
    return {
        "description": description,
        "content": {"application/json": {"example": {"ok": False, "error": message}}},
    }


_BAD_PAYLOAD = _error_example(
    "Missing or malformed JSON body or image data.", "Invalid image data"
)

SIGN_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: _BAD_PAYLOAD,
    500: _error_example(
        "Backend unavailable, signing tool failure or missing artifact.",
        "Signing tool reported success but produced no artifact",
    ),
}

VERIFY_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: _BAD_PAYLOAD,
    500: _error_example(
        "Backend unavailable or unexpected gateway error.",
        "Failed to build Docker image c2pa-demo",
    ),
}


def install_custom_openapi(app: FastAPI) -> Callable[[], dict[str, Any]]:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        app.openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            summary=app.summary,
            description=app.description,
            routes=app.routes,
            tags=OPENAPI_TAGS_METADATA,
            servers=app.servers,
            license_info=app.license_info,
        )
        return app.openapi_schema

    return custom_openapi
