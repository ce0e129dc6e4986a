"""
Media classification by file extension.

Maps an archive URI to a media kind and the content type the target
platform expects. Unsupported extensions still get a kind so that a
post's media can be partitioned before items are validated.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Literal, Optional

from .constants import (
    IMAGE_CONTENT_TYPES,
    UNSUPPORTED_VIDEO_EXTENSIONS,
    VIDEO_CONTENT_TYPES,
)

MediaKind = Literal["image", "video"]


@dataclass(frozen=True)
class MediaClassification:
    """
    Result of classifying a media file.

    Attributes:
        kind: ``"image"`` or ``"video"``
        content_type: MIME type, or None when the platform does not accept
            the extension
        extension: Lower-cased extension without the dot
    """
    kind: MediaKind
    content_type: Optional[str]
    extension: str

    @property
    def supported(self) -> bool:
        return self.content_type is not None


def get_extension(uri: str) -> str:
    """Return the lower-cased extension of ``uri`` without the leading dot."""
    return PurePosixPath(uri).suffix.lstrip('.').lower()


def get_image_content_type(extension: str) -> Optional[str]:
    """Content type for an image extension, None if unsupported."""
    return IMAGE_CONTENT_TYPES.get(extension.lower())


def get_video_content_type(extension: str) -> Optional[str]:
    """Content type for a video extension, None if unsupported."""
    return VIDEO_CONTENT_TYPES.get(extension.lower())


def classify(uri: str, is_video_hint: bool = False) -> MediaClassification:
    """
    Classify a media file by its extension.

    Args:
        uri: Archive-relative path of the media file
        is_video_hint: True when the export entry carries video-only fields

    Returns:
        MediaClassification with the kind and content type
    """
    extension = get_extension(uri)

    if (
        is_video_hint
        or extension in VIDEO_CONTENT_TYPES
        or extension in UNSUPPORTED_VIDEO_EXTENSIONS
    ):
        content_type = get_video_content_type(extension)
        kind: MediaKind = "video"
    else:
        content_type = get_image_content_type(extension)
        kind = "image"

    return MediaClassification(kind=kind, content_type=content_type, extension=extension)
