import base64
from pathlib import PurePath

_MEDIA_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "gif": "image/gif",
}


def guess_media_type(file_name: str) -> str:
    extension = PurePath(file_name).suffix.lstrip(".").lower()
    return _MEDIA_TYPES.get(extension, "image/jpeg")


def to_data_url(data: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(data_url: str) -> bytes:
    """Bytes carried by a data URI or bare base64 string."""
    _, sep, body = data_url.partition(";base64,")
    if not sep:
        body = data_url
    try:
        return base64.b64decode(body, validate=True)
    except Exception as exc:
        raise ValueError("Invalid base64 data URL") from exc
