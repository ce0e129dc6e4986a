"""
Shared fixtures and configuration for pytest.
"""

import io
import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from ig_migrate.exceptions import ArchiveReadError
from ig_migrate.models import AspectRatio, SourceMediaItem, SourcePost
from ig_migrate.processors import MediaCollaborators

# 2024-01-15 10:30:00 UTC
BASE_TIMESTAMP = 1705314600


def jpeg_bytes(size=(64, 48), color=(200, 30, 30)) -> bytes:
    """Encode a solid-color JPEG in memory."""
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format="JPEG")
    return out.getvalue()


class FakeArchive:
    """In-memory archive reader recording the URIs it was asked for."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.reads = []

    async def read_bytes(self, archive_folder, uri):
        self.reads.append(uri)
        if uri not in self.files:
            raise ArchiveReadError("Media file not found", uri=uri)
        return self.files[uri]


@pytest.fixture
def fake_archive():
    """Archive holding a handful of photos and one video."""
    files = {f"media/posts/photo{i}.jpg": b"jpeg-%d" % i for i in range(1, 10)}
    files["media/posts/clip.mp4"] = b"mp4-data"
    files["media/posts/clip.mov"] = b"mov-data"
    return FakeArchive(files)


@pytest.fixture
def collaborators(fake_archive):
    """Collaborators backed by the fake archive and fixed dimensions."""
    return MediaCollaborators(
        read_bytes=fake_archive.read_bytes,
        image_dimensions=AsyncMock(return_value=AspectRatio(width=1080, height=1350)),
        video_dimensions=AsyncMock(return_value=AspectRatio(width=1080, height=1920)),
        validate_video_size=Mock(return_value=True),
    )


@pytest.fixture
def make_post():
    """Factory building a SourcePost from media URIs."""

    def _make_post(uris=(), title=None, timestamp=BASE_TIMESTAMP, captions=None, **item_fields):
        captions = captions or {}
        media = [
            SourceMediaItem(
                uri=uri,
                creation_timestamp=timestamp,
                caption=captions.get(uri),
                **item_fields,
            )
            for uri in uris
        ]
        return SourcePost(title=title, creation_timestamp=timestamp, media=media)

    return _make_post


@pytest.fixture
def sample_export():
    """Posts JSON as written by Instagram, emoji bytes escaped one by one."""
    return [
        {
            "title": "Garden update ð\u009f\u008c±",
            "creation_timestamp": BASE_TIMESTAMP,
            "media": [
                {
                    "uri": "media/posts/202401/photo1.jpg",
                    "creation_timestamp": BASE_TIMESTAMP,
                    "title": "",
                    "media_metadata": {
                        "photo_metadata": {
                            "exif_data": [
                                {"scene_capture_type": "standard"},
                                {"latitude": 52.37, "longitude": 4.89},
                            ]
                        }
                    },
                },
                {
                    "uri": "media/posts/202401/photo2.jpg",
                    "creation_timestamp": BASE_TIMESTAMP,
                    "title": "",
                },
            ],
        },
        {
            "media": [
                {
                    "uri": "media/posts/202312/clip.mp4",
                    "creation_timestamp": BASE_TIMESTAMP - 86400,
                    "title": "Sunset",
                    "dubbing_info": [],
                }
            ],
        },
        {
            "title": "No date at all",
            "media": {"uri": "media/posts/lost.jpg", "title": ""},
        },
    ]


@pytest.fixture
def archive_folder(tmp_path, sample_export):
    """Extracted export on disk with the sample posts and media files."""
    folder = tmp_path / "instagram-export"
    content = folder / "your_instagram_activity" / "content"
    content.mkdir(parents=True)
    (content / "posts_1.json").write_text(json.dumps(sample_export), encoding="utf-8")

    photos = folder / "media" / "posts" / "202401"
    photos.mkdir(parents=True)
    (photos / "photo1.jpg").write_bytes(jpeg_bytes((80, 60)))
    (photos / "photo2.jpg").write_bytes(jpeg_bytes((60, 80), color=(30, 200, 30)))

    videos = folder / "media" / "posts" / "202312"
    videos.mkdir(parents=True)
    (videos / "clip.mp4").write_bytes(b"\x00\x00\x00\x18ftypmp42")

    return folder


@pytest.fixture
def image_file(tmp_path) -> Path:
    """A 320x200 JPEG on disk."""
    path = tmp_path / "image.jpg"
    path.write_bytes(jpeg_bytes((320, 200)))
    return path
