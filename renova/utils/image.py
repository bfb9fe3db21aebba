"""Image payload helpers: data URLs and decode checks.

Generated images travel between the AI service, the workspace and the
project store as `data:<mime>;base64,<...>` URLs, the same reference shape
the browser client renders directly.
"""

from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass

from PIL import Image

DATA_URL_PREFIX = "data:"


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"{DATA_URL_PREFIX}{mime_type};base64,{encoded}"


def is_data_url(value: str) -> bool:
    return value.startswith(DATA_URL_PREFIX)


def from_data_url(value: str) -> ImagePayload:
    """Decode a base64 data URL. Raises ValueError on anything else."""
    if not is_data_url(value):
        raise ValueError("Not a data URL")
    header, sep, encoded = value.partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Only base64 data URLs are supported")
    mime_type = header[len(DATA_URL_PREFIX) : -len(";base64")] or "application/octet-stream"
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Data URL payload is not valid base64") from exc
    return ImagePayload(data=data, mime_type=mime_type)


def open_image(data: bytes) -> Image.Image:
    """Open and fully decode image bytes (catches truncated files early)."""
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def guess_mime_type(img: Image.Image, fallback: str = "image/png") -> str:
    return Image.MIME.get(img.format or "", fallback)
