from typing import Any

import httpx

from attestgate_sdk.encoding import guess_media_type, to_data_url
from attestgate_sdk.types import HealthResponse, ImageRequestBody, SignResponse, VerifyResponse


def build_image_request(name: str, data: bytes | str) -> ImageRequestBody:
    """Request body for sign/verify; raw bytes become a data URI typed by *name*."""
    if isinstance(data, bytes):
        image_data = to_data_url(data, guess_media_type(name))
    else:
        image_data = data
    return {"imageName": name, "imageData": image_data}


def _json_body(response: httpx.Response) -> Any:
    # The gateway answers {ok: false, error} with 4xx/5xx statuses; those bodies are
    # results for the caller. Anything without a JSON body is a transport problem.
    try:
        return response.json()
    except ValueError:
        response.raise_for_status()
        raise


class GatewayClient:
    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def health(self) -> HealthResponse:
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            response = client.get(f"{self._base_url}/api/health")
            response.raise_for_status()
            return response.json()

    def sign_image(self, name: str, data: bytes | str) -> SignResponse:
        return self._post("/api/sign", build_image_request(name, data))

    def verify_image(self, name: str, data: bytes | str) -> VerifyResponse:
        return self._post("/api/verify", build_image_request(name, data))

    def _post(self, path: str, body: ImageRequestBody) -> Any:
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            response = client.post(f"{self._base_url}{path}", json=body)
            return _json_body(response)


class AsyncGatewayClient:
    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def health(self) -> HealthResponse:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(f"{self._base_url}/api/health")
            response.raise_for_status()
            return response.json()

    async def sign_image(self, name: str, data: bytes | str) -> SignResponse:
        return await self._post("/api/sign", build_image_request(name, data))

    async def verify_image(self, name: str, data: bytes | str) -> VerifyResponse:
        return await self._post("/api/verify", build_image_request(name, data))

    async def _post(self, path: str, body: ImageRequestBody) -> Any:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(f"{self._base_url}{path}", json=body)
            return _json_body(response)
