"""
Image metadata and resizing backed by Pillow.

Pillow is synchronous; every call here runs in a worker thread so the
event loop keeps serving other media items.
"""

import asyncio
import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from .constants import API_LIMIT_IMAGE_UPLOAD_SIZE, IMAGE_LENGTH_LIMIT
from .models import AspectRatio

logger = logging.getLogger(__name__)


def _format_bytes(bytes_count: float) -> str:
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.2f} {unit}"
        bytes_count /= 1024.0
    return f"{bytes_count:.2f} TB"


def _read_size(path: Path) -> Optional[AspectRatio]:
    with Image.open(path) as img:
        width, height = img.size
    if not width or not height:
        return None
    return AspectRatio(width=width, height=height)


async def image_dimensions(path: Union[str, Path]) -> Optional[AspectRatio]:
    """
    Read the pixel dimensions of an image file.

    Args:
        path: Path to the image

    Returns:
        AspectRatio, or None if the file cannot be opened or has no size
    """
    try:
        return await asyncio.to_thread(_read_size, Path(path))
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.error(f"Failed to get image aspect ratio; image path: {path}, error: {e}")
        return None


def is_image_too_large(data: bytes, max_bytes: int = API_LIMIT_IMAGE_UPLOAD_SIZE) -> bool:
    """Check whether image bytes exceed the upload limit."""
    return len(data) > max_bytes


def _resize(data: bytes, max_length: int) -> Optional[bytes]:
    with Image.open(io.BytesIO(data)) as img:
        width, height = img.size
        if not width or not height:
            logger.error("Image width or height is missing, image cannot be resized")
            return None

        img_format = img.format or "JPEG"
        # Scale the longest side down, never up
        img.thumbnail((max_length, max_length), Image.LANCZOS)
        logger.info(f"before: w{width} h{height} | after: w{img.width} h{img.height}")

        if img_format == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        out = io.BytesIO()
        img.save(out, format=img_format)
        return out.getvalue()


async def resize_to_fit(
    data: bytes,
    max_bytes: int = API_LIMIT_IMAGE_UPLOAD_SIZE,
    max_length: int = IMAGE_LENGTH_LIMIT
) -> Optional[bytes]:
    """
    Shrink an image so it fits under the upload limit.

    Images already under the limit are returned untouched. The original
    file on disk is never modified.

    Args:
        data: Encoded image bytes
        max_bytes: Upload size limit
        max_length: Maximum length of the longest side in pixels

    Returns:
        Bytes that fit the limit, or None if the image cannot be made to fit
    """
    if not is_image_too_large(data, max_bytes):
        return data

    logger.warning(
        f"Image size ({_format_bytes(len(data))}) is larger than upload limit "
        f"({_format_bytes(max_bytes)}). Will attempt to resize"
    )

    try:
        resized = await asyncio.to_thread(_resize, data, max_length)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.error(f"Failed to resize image: {e}")
        return None

    if resized is None:
        return None

    if is_image_too_large(resized, max_bytes):
        logger.error(
            f"Resized image size ({_format_bytes(len(resized))}) is larger than "
            f"upload limit ({_format_bytes(max_bytes)})"
        )
        return None

    logger.info(f"Image resized to {_format_bytes(len(resized))}")
    return resized
