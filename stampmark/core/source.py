"""
Image Source Loading
====================
Turns an image reference into a decoded Pillow image plus the descriptor
string used to pick the output format.

Supported references:
- bytes / bytearray / memoryview: an encoded image buffer
- "data:" URLs (base64 or percent-encoded)
- "http://" and "https://" URLs, fetched with requests in a worker thread
- filesystem paths (str or os.PathLike), read with aiofiles
- an already-open PIL Image

Technical Notes:
- Decoding is forced with Image.load() so truncated data fails here,
  not later while drawing
- EXIF orientation is applied, the way a browser displays the image
- Animated images keep their first frame only
"""

import asyncio
import base64
import logging
import os
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple, Union
from urllib.parse import unquote_to_bytes

import aiofiles
import requests
from PIL import Image, ImageOps

from .errors import DecodeError

logger = logging.getLogger(__name__)

ImageRef = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", Image.Image]

# Markers checked against the descriptor, in order
_FORMAT_MARKERS = (
    ("image/png", ("PNG", "image/png")),
    ("image/gif", ("PNG", "image/png")),  # animation is dropped
    ("image/webp", ("WEBP", "image/webp")),
)
_DEFAULT_FORMAT = ("JPEG", "image/jpeg")


@dataclass
class SourceImage:
    """A decoded source image and the descriptor of where it came from."""
    image: Image.Image
    descriptor: str = ""

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def output_format(descriptor: str) -> Tuple[str, str]:
    """
    Pick the output format from a source descriptor.

    Args:
        descriptor: Data URL header or MIME type of the source.

    Returns:
        (Pillow format name, MIME type). JPEG unless the descriptor names
        PNG, GIF or WEBP.
    """
    for marker, result in _FORMAT_MARKERS:
        if marker in descriptor:
            return result
    return _DEFAULT_FORMAT


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """
    Split a data URL into its header and decoded payload.

    Returns:
        (header, payload) where header is e.g. "data:image/png;base64".

    Raises:
        ValueError: If the URL has no comma separator or bad base64.
    """
    header, sep, payload = url.partition(",")
    if not sep:
        raise ValueError("Malformed data URL: missing ','")

    if header.endswith(";base64"):
        return header, base64.b64decode(payload)
    return header, unquote_to_bytes(payload)


def _is_http_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _fetch_url(url: str, timeout: Optional[float] = None) -> bytes:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


async def _read_file(path: Union[str, "os.PathLike[str]"]) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


def _decode(data: bytes) -> Tuple[Image.Image, str]:
    with Image.open(BytesIO(data)) as opened:
        opened.load()
        mime = Image.MIME.get(opened.format or "", "")
        # exif_transpose always hands back a new image, detached from the file
        image = ImageOps.exif_transpose(opened)
    return image, mime


def _decode_image_object(image: Image.Image) -> Tuple[Image.Image, str]:
    image.load()
    mime = Image.MIME.get(image.format or "", "")
    return ImageOps.exif_transpose(image), mime


async def load_source(image_ref: ImageRef, timeout: Optional[float] = None) -> SourceImage:
    """
    Load and decode an image reference.

    Args:
        image_ref: Buffer, data URL, http(s) URL, path or PIL Image.
        timeout: Seconds to wait for an http(s) response, None for no limit.

    Returns:
        SourceImage with the decoded image and its descriptor. The
        descriptor is the data URL header for data URLs, otherwise the
        MIME type Pillow detected.

    Raises:
        DecodeError: If the reference cannot be read or decoded. The
            loader's exception is kept in ``original``.
    """
    try:
        if isinstance(image_ref, Image.Image):
            image, descriptor = await asyncio.to_thread(_decode_image_object, image_ref)
            return SourceImage(image=image, descriptor=descriptor)

        header = ""
        if isinstance(image_ref, (bytes, bytearray, memoryview)):
            data = bytes(image_ref)
        elif isinstance(image_ref, str) and image_ref.startswith("data:"):
            header, data = parse_data_url(image_ref)
        elif isinstance(image_ref, str) and _is_http_url(image_ref):
            data = await asyncio.to_thread(_fetch_url, image_ref, timeout)
        elif isinstance(image_ref, (str, os.PathLike)):
            data = await _read_file(image_ref)
        else:
            raise TypeError(f"Unsupported image reference: {type(image_ref).__name__}")

        image, mime = await asyncio.to_thread(_decode, data)

    except Exception as e:
        raise DecodeError(f"Failed to load image: {e}", original=e) from e

    descriptor = header or mime
    logger.debug("Decoded %dx%d image (%s)", image.width, image.height, descriptor or "unknown")
    return SourceImage(image=image, descriptor=descriptor)
