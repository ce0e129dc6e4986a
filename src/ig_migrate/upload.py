"""
Upload payload preparation and the uploader interface.

Posts leave the splitter with their original image bytes. Before upload,
images above the platform limit are resized; images that cannot be made
to fit are dropped.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Protocol

from .image import is_image_too_large, resize_to_fit
from .models import NormalizedMediaUnit, TargetPost

logger = logging.getLogger(__name__)

ResizeFunc = Callable[[bytes], Awaitable[Optional[bytes]]]


async def prepare_for_upload(
    post: TargetPost,
    resize: ResizeFunc = resize_to_fit
) -> Optional[TargetPost]:
    """
    Make a post's media fit the upload limits.

    Args:
        post: Post produced by the splitter
        resize: Coroutine shrinking image bytes, returning None on failure

    Returns:
        Post ready for upload, or None if it had media and lost all of it
    """
    if not post.media or post.kind != "image":
        return post

    prepared: List[NormalizedMediaUnit] = []
    changed = False
    for unit in post.media:
        if not is_image_too_large(unit.data):
            prepared.append(unit)
            continue

        resized = await resize(unit.data)
        if resized is None:
            logger.error(f"Dropping image {unit.source_uri} - could not resize below the upload limit")
            changed = True
            continue
        prepared.append(unit.model_copy(update={"data": resized}))
        changed = True

    if not prepared:
        logger.warning(f"No media left for post from {post.effective_date.isoformat()}, skipping")
        return None

    if not changed:
        return post

    return post.model_copy(update={"media": prepared})


class Uploader(Protocol):
    """Destination for prepared posts. Uploads are awaited one at a time."""

    async def upload(self, post: TargetPost) -> Optional[str]:
        """Publish a post and return its URL, if the destination has one."""
        ...


class SimulatedUploader:
    """
    Uploader that only records posts.

    Used for simulate (dry run) mode so a migration can be reviewed before
    anything is published.
    """

    def __init__(self):
        self.posts: List[TargetPost] = []

    async def upload(self, post: TargetPost) -> Optional[str]:
        self.posts.append(post)
        preview = post.text if len(post.text) <= 50 else post.text[:50] + "..."
        logger.debug(
            f"Simulated post {post.effective_date.isoformat()} "
            f"[{len(post.media)} {post.kind or 'text'}]: {preview!r}"
        )
        return None

    @property
    def media_count(self) -> int:
        return sum(len(post.media) for post in self.posts)
