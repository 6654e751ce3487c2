"""Packaged image inspection."""

from .decoder import (
    ImageDecodeError,
    ImageDecoder,
    ImageInfo,
    PillowImageDecoder,
    decode_svg,
    read_image_info,
)
from .validator import AssetValidator, collect_icons, collect_theme_images

__all__ = [
    "AssetValidator",
    "ImageDecodeError",
    "ImageDecoder",
    "ImageInfo",
    "PillowImageDecoder",
    "collect_icons",
    "collect_theme_images",
    "decode_svg",
    "read_image_info",
]
