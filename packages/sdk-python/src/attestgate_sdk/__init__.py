from attestgate_sdk.client import (
    AsyncGatewayClient,
    GatewayClient,
    build_image_request,
)
from attestgate_sdk.encoding import decode_data_url, guess_media_type, to_data_url

__all__ = [
    "decode_data_url",
    "guess_media_type",
    "to_data_url",
    "build_image_request",
    "GatewayClient",
    "AsyncGatewayClient",
]
