"""
Data models for the Instagram migrator.

This module defines Pydantic models for the posts read from an Instagram
export and for the posts produced for Bluesky.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import MAX_IMAGES_PER_POST, POST_TEXT_LIMIT

# Export fields that only appear on video entries
VIDEO_ONLY_FIELDS = ("dubbing_info", "media_variants")


class GeoTag(BaseModel):
    """Latitude/longitude pair taken from a photo's EXIF data."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class AspectRatio(BaseModel):
    """Pixel dimensions of an image or video frame."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class SourceMediaItem(BaseModel):
    """
    One physical photo or video from the export.

    Parsed from an entry of a post's ``media`` list. Immutable once created.
    """

    model_config = ConfigDict(frozen=True)

    uri: str = Field(
        ...,
        min_length=1,
        description="Path of the media file relative to the archive folder"
    )
    creation_timestamp: Optional[int] = Field(
        None,
        description="Creation time in seconds since the epoch"
    )
    caption: Optional[str] = Field(
        None,
        description="Raw export text attached to this item"
    )
    geo_tag: Optional[GeoTag] = Field(
        None,
        description="Location from the first EXIF entry that carries one"
    )
    is_video_hint: bool = Field(
        False,
        description="True when the export entry has video-only fields"
    )

    @classmethod
    def from_export(cls, data: Dict[str, Any]) -> "SourceMediaItem":
        """
        Build an item from an entry of the export's ``media`` list.

        Args:
            data: Raw export dictionary

        Returns:
            New SourceMediaItem

        Raises:
            ValidationError: If required fields are missing or invalid
        """
        return cls.model_validate({
            "uri": data.get("uri"),
            "creation_timestamp": data.get("creation_timestamp"),
            "caption": data.get("title"),
            "geo_tag": _extract_geo_tag(data.get("media_metadata")),
            "is_video_hint": any(key in data for key in VIDEO_ONLY_FIELDS),
        })


def _extract_geo_tag(media_metadata: Any) -> Optional[Dict[str, float]]:
    """Return the first EXIF entry with a latitude, if any."""
    if not isinstance(media_metadata, dict):
        return None

    photo_metadata = media_metadata.get("photo_metadata") or {}
    for exif in photo_metadata.get("exif_data") or []:
        if isinstance(exif, dict) and exif.get("latitude") is not None:
            return {
                "latitude": exif["latitude"],
                "longitude": exif.get("longitude", 0.0),
            }
    return None


class SourcePost(BaseModel):
    """
    A post from the export with its ordered media.

    The export stores ``media`` either as a list or as a single object;
    both are normalized to a list.
    """

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = Field(
        None,
        description="Raw export text of the post"
    )
    creation_timestamp: Optional[int] = Field(
        None,
        description="Creation time in seconds since the epoch"
    )
    media: List[SourceMediaItem] = Field(
        default_factory=list,
        description="Media items in their original order"
    )

    @field_validator("media", mode="before")
    @classmethod
    def wrap_single_media(cls, v: Any) -> Any:
        """Accept a single media object where a list is expected."""
        if v is None:
            return []
        if isinstance(v, (dict, SourceMediaItem)):
            return [v]
        return v

    @classmethod
    def from_export(cls, data: Dict[str, Any]) -> "SourcePost":
        """
        Build a post from an entry of the export's posts JSON.

        Args:
            data: Raw export dictionary

        Returns:
            New SourcePost

        Raises:
            ValidationError: If the entry is malformed
        """
        media = data.get("media")
        if isinstance(media, dict):
            media = [media]

        return cls(
            title=data.get("title"),
            creation_timestamp=data.get("creation_timestamp"),
            media=[SourceMediaItem.from_export(item) for item in media or []],
        )


class NormalizedMediaUnit(BaseModel):
    """
    A media item prepared for upload.

    ``content_type`` is None for unsupported files and ``data`` is None for
    unreadable or rejected files. Only usable units reach a TargetPost.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["image", "video"]
    text: str = ""
    content_type: Optional[str] = None
    data: Optional[bytes] = Field(None, repr=False)
    aspect_ratio: Optional[AspectRatio] = None
    source_uri: str = ""

    @field_validator("content_type")
    @classmethod
    def non_empty_content_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("content_type must be non-empty or None")
        return v

    @property
    def usable(self) -> bool:
        """True when the unit has both a content type and bytes."""
        return self.content_type is not None and self.data is not None

    @property
    def byte_size(self) -> int:
        return len(self.data) if self.data is not None else 0

    def to_plan_dict(self) -> Dict[str, Any]:
        """Describe the unit without its payload."""
        return {
            "kind": self.kind,
            "content_type": self.content_type,
            "alt_text": self.text,
            "aspect_ratio": self.aspect_ratio.model_dump() if self.aspect_ratio else None,
            "byte_size": self.byte_size,
            "source_uri": self.source_uri,
        }


class TargetPost(BaseModel):
    """
    A post that satisfies the Bluesky structural limits.

    Media is empty, 1-4 images, or exactly one video.
    """

    model_config = ConfigDict(frozen=True)

    effective_date: datetime
    text: str = Field("", max_length=POST_TEXT_LIMIT)
    media: List[NormalizedMediaUnit] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_media_shape(self) -> "TargetPost":
        """Enforce kind purity and per-kind count limits."""
        if any(not unit.usable for unit in self.media):
            raise ValueError("TargetPost media must only contain usable units")

        kinds = {unit.kind for unit in self.media}
        if len(kinds) > 1:
            raise ValueError("TargetPost cannot mix image and video media")

        if "image" in kinds and len(self.media) > MAX_IMAGES_PER_POST:
            raise ValueError(
                f"TargetPost holds {len(self.media)} images, "
                f"max is {MAX_IMAGES_PER_POST}"
            )

        if "video" in kinds and len(self.media) > 1:
            raise ValueError("TargetPost holds more than one video")

        return self

    @property
    def kind(self) -> Optional[str]:
        """Kind of the embedded media, None for a text-only post."""
        return self.media[0].kind if self.media else None

    def to_plan_dict(self) -> Dict[str, Any]:
        """
        Convert the post to a JSON-ready dictionary.

        Returns:
            Dictionary with an ISO-8601 date and media descriptions
        """
        return {
            "effective_date": self.effective_date.isoformat(),
            "text": self.text,
            "media": [unit.to_plan_dict() for unit in self.media],
        }
