"""Constants for the Instagram to Bluesky migrator."""

from typing import Final

# Bluesky post limits
# https://docs.bsky.app/docs/advanced-guides/posts
MAX_IMAGES_PER_POST: Final[int] = 4
POST_TEXT_LIMIT: Final[int] = 300
POST_TEXT_TRUNCATE_SUFFIX: Final[str] = "..."

# Image lexicon maxSize (~1MB)
API_LIMIT_IMAGE_UPLOAD_SIZE: Final[int] = 976000
IMAGE_LENGTH_LIMIT: Final[int] = 1920

# Hard ceiling for video uploads
VIDEO_MAX_BYTES: Final[int] = 100 * 1024 * 1024
DEFAULT_VIDEO_DIMENSION: Final[int] = 640

# Migration defaults
DEFAULT_UPLOAD_DELAY: Final[float] = 3.0  # seconds between uploads
DEFAULT_CONCURRENCY: Final[int] = 4  # posts split concurrently
ESTIMATE_OVERHEAD_FACTOR: Final[float] = 1.1

GEO_ANNOTATION_TEMPLATE: Final[str] = (
    "\nPhoto taken at these geographical coordinates: geo:{latitude},{longitude}"
)

# Candidate locations of the posts JSON inside an export, in lookup order
POSTS_JSON_CANDIDATES: Final[tuple] = (
    "your_instagram_activity/content/posts_1.json",
    "content/posts_1.json",
    "posts.json",
)

# Extension -> content type
IMAGE_CONTENT_TYPES: Final[dict] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "heic": "image/heic",
}

VIDEO_CONTENT_TYPES: Final[dict] = {
    "mp4": "video/mp4",
    "mov": "video/quicktime",
}

# Extensions recognized as video even though the platform rejects them
UNSUPPORTED_VIDEO_EXTENSIONS: Final[frozenset] = frozenset({
    "webm", "avi", "mkv", "m4v", "3gp",
})
