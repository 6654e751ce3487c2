"""Image header decoding: width, height and mime type of packaged images."""

import io
import re
from contextlib import aclosing
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Protocol

from PIL import Image

from ..package import FileOracle

SVG_MIME = "image/svg+xml"
_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)")


class ImageDecodeError(ValueError):
    """Raised when image data cannot be decoded (yet)."""


@dataclass(frozen=True)
class ImageInfo:
    """Decoded image geometry."""

    width: int
    height: int
    mime: str | None


class ImageDecoder(Protocol):
    def decode(self, data: bytes | str) -> ImageInfo:
        """Decode image metadata or raise ImageDecodeError."""
        ...


def _svg_length(value: str | None) -> float | None:
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    return float(match.group(1)) if match else None


def decode_svg(text: str) -> ImageInfo:
    """Read the intrinsic size of an SVG document from its root element."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ImageDecodeError(f"Invalid SVG: {exc}") from exc
    if not root.tag.endswith("svg"):
        raise ImageDecodeError(f"Not an SVG document: <{root.tag}>")

    width = _svg_length(root.get("width"))
    height = _svg_length(root.get("height"))
    if width is None or height is None:
        view_box = (root.get("viewBox") or "").replace(",", " ").split()
        if len(view_box) == 4:
            try:
                width = width if width is not None else float(view_box[2])
                height = height if height is not None else float(view_box[3])
            except ValueError as exc:
                raise ImageDecodeError(f"Invalid SVG viewBox: {view_box}") from exc
    if width is None or height is None:
        raise ImageDecodeError("SVG has no intrinsic size")
    return ImageInfo(width=int(width), height=int(height), mime=SVG_MIME)


class PillowImageDecoder:
    """Decodes raster headers with Pillow and SVG headers with ElementTree."""

    def decode(self, data: bytes | str) -> ImageInfo:
        if isinstance(data, str):
            return decode_svg(data)
        if data.lstrip(b"\xef\xbb\xbf \t\r\n").startswith(b"<"):
            return decode_svg(data.decode("utf-8", errors="replace"))
        try:
            # Image.open only reads the header; pixel data is never loaded.
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
                image_format = image.format
        except Exception as exc:
            raise ImageDecodeError(f"Unable to decode image: {exc}") from exc
        return ImageInfo(width=width, height=height, mime=Image.MIME.get(image_format or ""))


def _join(chunks: list[bytes | str]) -> bytes | str:
    if chunks and isinstance(chunks[0], str):
        return "".join(chunks)
    return b"".join(chunks)


async def read_image_info(
    oracle: FileOracle, path: str, decoder: ImageDecoder
) -> ImageInfo:
    """Decode an image, reading only as much of the stream as needed.

    A decode is attempted after every chunk. Once the stream is exhausted a
    last attempt is made and its ImageDecodeError propagates.
    """
    text_mode = path.lower().endswith(".svg")
    chunks: list[bytes | str] = []
    async with aclosing(oracle.open_stream(path, text_mode=text_mode)) as stream:
        async for chunk in stream:
            chunks.append(chunk)
            try:
                return decoder.decode(_join(chunks))
            except ImageDecodeError:
                # Size information isn't available yet.
                continue
    return decoder.decode(_join(chunks))
