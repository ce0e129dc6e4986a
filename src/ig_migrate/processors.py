"""
Per-item media processing.

Each source media item becomes one NormalizedMediaUnit. Failures never
raise out of this module: an unsupported type, an unreadable file or an
oversized video produce a unit that is not ``usable`` and gets dropped by
the splitter.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from .archive import media_path, read_bytes
from .constants import DEFAULT_VIDEO_DIMENSION, GEO_ANNOTATION_TEMPLATE
from .image import image_dimensions
from .media_types import classify
from .models import AspectRatio, NormalizedMediaUnit, SourceMediaItem
from .text import decode_text, truncate
from .video import validate_video_size, video_dimensions

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class MediaCollaborators:
    """
    External services used while processing media items.

    Attributes:
        read_bytes: Coroutine reading an archive-relative URI
        image_dimensions: Coroutine returning an image's size or None
        video_dimensions: Coroutine returning a video's size, may raise
        validate_video_size: Predicate applied to raw video bytes
    """
    read_bytes: Callable[[PathLike, str], Awaitable[bytes]] = read_bytes
    image_dimensions: Callable[[PathLike], Awaitable[Optional[AspectRatio]]] = image_dimensions
    video_dimensions: Callable[[PathLike], Awaitable[AspectRatio]] = video_dimensions
    validate_video_size: Callable[[bytes], bool] = validate_video_size


DEFAULT_COLLABORATORS = MediaCollaborators()

# Used when ffprobe cannot tell the frame size
SQUARE_PLACEHOLDER = AspectRatio(width=DEFAULT_VIDEO_DIMENSION, height=DEFAULT_VIDEO_DIMENSION)


async def _read_media(
    item: SourceMediaItem,
    archive_folder: PathLike,
    collaborators: MediaCollaborators
) -> Optional[bytes]:
    try:
        return await collaborators.read_bytes(archive_folder, item.uri)
    except Exception as e:
        logger.error(f"Failed to read media file: {media_path(archive_folder, item.uri)} ({e})")
        return None


def image_caption(item: SourceMediaItem, include_caption: bool = True) -> str:
    """
    Build the alt text of an image.

    The decoded caption is followed by a coordinates line when the photo
    has a geotag with a positive latitude, and the result is truncated.
    """
    text = decode_text(item.caption or "") if include_caption else ""

    geo = item.geo_tag
    if geo is not None and geo.latitude > 0:
        text += GEO_ANNOTATION_TEMPLATE.format(latitude=geo.latitude, longitude=geo.longitude)

    return _truncate_caption(text, item.uri)


def _truncate_caption(text: str, uri: str) -> str:
    truncated = truncate(text)
    if truncated != text:
        logger.info(f"Truncating caption of {uri} from {len(text)} to {len(truncated)} characters")
    return truncated


async def process_image_item(
    item: SourceMediaItem,
    archive_folder: PathLike,
    collaborators: MediaCollaborators = DEFAULT_COLLABORATORS,
    include_caption: bool = True
) -> NormalizedMediaUnit:
    """
    Normalize one image item.

    Oversized images are reported as-is; resizing happens when upload
    payloads are prepared.

    Args:
        item: Source image item
        archive_folder: Root of the extracted export
        collaborators: Archive and metadata services
        include_caption: False when the item's caption already serves as
            the post text

    Returns:
        NormalizedMediaUnit of kind image
    """
    classification = classify(item.uri)
    text = image_caption(item, include_caption)

    if classification.content_type is None:
        logger.warning(f"Unsupported file type '{classification.extension}': {item.uri}")
        return NormalizedMediaUnit(kind="image", text=text, source_uri=item.uri)

    data = await _read_media(item, archive_folder, collaborators)
    aspect_ratio = None
    if data is not None:
        try:
            aspect_ratio = await collaborators.image_dimensions(media_path(archive_folder, item.uri))
        except Exception as e:
            logger.warning(f"Could not determine image dimensions for {item.uri}: {e}")

    return NormalizedMediaUnit(
        kind="image",
        text=text,
        content_type=classification.content_type,
        data=data,
        aspect_ratio=aspect_ratio,
        source_uri=item.uri,
    )


async def process_video_item(
    item: SourceMediaItem,
    archive_folder: PathLike,
    collaborators: MediaCollaborators = DEFAULT_COLLABORATORS,
    include_caption: bool = True
) -> NormalizedMediaUnit:
    """
    Normalize one video item.

    Videos over the size ceiling are rejected (``data`` is None). When the
    frame size cannot be probed a square placeholder is used.

    Args:
        item: Source video item
        archive_folder: Root of the extracted export
        collaborators: Archive and metadata services
        include_caption: False when the item's caption already serves as
            the post text

    Returns:
        NormalizedMediaUnit of kind video
    """
    classification = classify(item.uri, is_video_hint=True)
    text = decode_text(item.caption or "") if include_caption else ""
    text = _truncate_caption(text, item.uri)

    if classification.content_type is None:
        logger.warning(f"Unsupported video file type '{classification.extension}': {item.uri}")
        return NormalizedMediaUnit(kind="video", text=text, source_uri=item.uri)

    data = await _read_media(item, archive_folder, collaborators)

    if data is not None and not collaborators.validate_video_size(data):
        logger.warning(f"Dropping video {item.uri} - exceeds the upload size limit")
        data = None

    aspect_ratio = None
    if data is not None:
        try:
            aspect_ratio = await collaborators.video_dimensions(media_path(archive_folder, item.uri))
        except Exception as e:
            logger.warning(f"Could not determine video dimensions, using square placeholder: {e}")
            aspect_ratio = SQUARE_PLACEHOLDER

    return NormalizedMediaUnit(
        kind="video",
        text=text,
        content_type=classification.content_type,
        data=data,
        aspect_ratio=aspect_ratio,
        source_uri=item.uri,
    )

