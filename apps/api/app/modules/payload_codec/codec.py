import base64
import binascii
import re
from dataclasses import dataclass
from pathlib import PurePath

from app.core.errors import MalformedPayload

DEFAULT_EXTENSION = "jpg"

_DATA_URI_RE = re.compile(r"^data:([^;,]+);base64,(.*)$", re.DOTALL)


@dataclass(frozen=True)
class EncodedPayload:
    media_type: str | None
    body: str

    def to_data_url(self) -> str:
        return f"data:{self.media_type or 'application/octet-stream'};base64,{self.body}"


@dataclass(frozen=True)
class DecodedImage:
    data: bytes
    media_type: str


def extension_for(file_name: str | None) -> str:
    """Extension of an untrusted client file name, without the dot."""
    if not file_name:
        return DEFAULT_EXTENSION
    suffix = PurePath(file_name).suffix.lstrip(".")
    if not suffix or not suffix.isalnum():
        return DEFAULT_EXTENSION
    return suffix


def media_type_for_extension(extension: str) -> str:
    return "image/png" if "png" in extension.lower() else "image/jpeg"


def parse_payload(raw: object) -> EncodedPayload:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedPayload()

    match = _DATA_URI_RE.match(raw.strip())
    if match:
        return EncodedPayload(media_type=match.group(1), body=match.group(2))
    return EncodedPayload(media_type=None, body=raw)


def decode(raw: object, *, file_name: str | None = None) -> DecodedImage:
    payload = parse_payload(raw)
    body = "".join(payload.body.split())
    if not body:
        raise MalformedPayload()

    try:
        data = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedPayload() from exc

    if not data:
        raise MalformedPayload()

    media_type = payload.media_type or media_type_for_extension(extension_for(file_name))
    return DecodedImage(data=data, media_type=media_type)


def encode(data: bytes, media_type: str | None) -> EncodedPayload:
    return EncodedPayload(media_type=media_type, body=base64.b64encode(data).decode("ascii"))
