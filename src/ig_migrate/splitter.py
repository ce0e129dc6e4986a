"""
Split a source post into posts that satisfy the Bluesky limits.

A Bluesky post holds up to four images or a single video, never both.
An Instagram post can carry any number of photos and videos, so one
source post may become several target posts:

- media is grouped by kind, keeping the original order within each kind,
- the images are chunked into groups of at most four and emitted first,
- every video then gets its own post,
- when more than one post results, each gets a " (Part i/M)" suffix and
  a timestamp one second after the previous part.
"""

import asyncio
import logging
from datetime import timedelta
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from .constants import MAX_IMAGES_PER_POST, POST_TEXT_LIMIT
from .dates import effective_timestamp
from .exceptions import MissingTimestampError
from .media_types import MediaKind, classify
from .models import NormalizedMediaUnit, SourceMediaItem, SourcePost, TargetPost
from .processors import (
    DEFAULT_COLLABORATORS,
    MediaCollaborators,
    process_image_item,
    process_video_item,
)
from .text import decode_text, truncate

logger = logging.getLogger(__name__)


def media_kind(item: SourceMediaItem) -> MediaKind:
    """Kind of a source media item."""
    return classify(item.uri, item.is_video_hint).kind


def group_by_kind(
    media: Sequence[SourceMediaItem]
) -> Tuple[List[SourceMediaItem], List[SourceMediaItem]]:
    """
    Separate media into images and videos, each in original order.

    Example:
        [img1, vid1, img2, vid2] -> ([img1, img2], [vid1, vid2])
    """
    images, videos = [], []
    for item in media:
        if media_kind(item) == "video":
            videos.append(item)
        else:
            images.append(item)
    return images, videos


def chunk(items: Sequence[SourceMediaItem], size: int = MAX_IMAGES_PER_POST) -> List[List[SourceMediaItem]]:
    """Split items into consecutive groups of at most ``size``."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def resolve_title(post: SourcePost) -> str:
    """
    Pick the text of the post.

    The post title wins; a post with exactly one media item falls back to
    that item's caption; otherwise the text is empty.
    """
    if post.title:
        return decode_text(post.title)
    if len(post.media) == 1 and post.media[0].caption:
        return decode_text(post.media[0].caption)
    return ""


def part_suffix(index: int, total: int) -> str:
    """Suffix for the ``index``-th (1-based) of ``total`` parts."""
    return f" (Part {index}/{total})"


class PostSplitter:
    """
    Turns one SourcePost into an ordered list of TargetPosts.

    Splitting is pure given the post and the archive contents: the
    splitter holds no state between calls, so posts may be split
    concurrently.

    Example:
        ```python
        splitter = PostSplitter()
        target_posts = await splitter.split(post, archive_folder)
        ```
    """

    def __init__(self, collaborators: MediaCollaborators = DEFAULT_COLLABORATORS):
        """
        Initialize the splitter.

        Args:
            collaborators: Archive and metadata services used by the item
                processors
        """
        self.collaborators = collaborators

    async def split(self, post: SourcePost, archive_folder: Union[str, Path]) -> List[TargetPost]:
        """
        Split a source post.

        Args:
            post: Source post
            archive_folder: Root of the extracted export

        Returns:
            Target posts in emission order; empty if every media group was
            dropped

        Raises:
            MissingTimestampError: If the post has no resolvable timestamp
        """
        base_date = effective_timestamp(post)
        if base_date is None:
            raise MissingTimestampError("Post has no creation timestamp")

        title = resolve_title(post)

        if not post.media:
            return [TargetPost(effective_date=base_date, text=truncate(title))]

        # The single item's caption already became the post text
        include_caption = not (len(post.media) == 1 and not post.title)

        images, videos = group_by_kind(post.media)
        groups = [
            self._process_images(group, archive_folder, include_caption)
            for group in chunk(images)
        ]
        groups.extend(
            self._process_video(item, archive_folder, include_caption)
            for item in videos
        )

        processed = await asyncio.gather(*groups)

        media_groups = []
        for units in processed:
            usable = [unit for unit in units if unit.usable]
            if usable:
                media_groups.append(usable)
            else:
                logger.warning(
                    f"Dropping part of post from {base_date.isoformat()} - no usable media"
                )

        total = len(media_groups)
        if total > 1:
            logger.debug(f"Splitting post from {base_date.isoformat()} into {total} parts")

        target_posts = []
        for index, media in enumerate(media_groups, start=1):
            if total > 1:
                suffix = part_suffix(index, total)
                text = truncate(title, POST_TEXT_LIMIT - len(suffix)) + suffix
                date = base_date + timedelta(seconds=index - 1)
            else:
                text = truncate(title)
                date = base_date
            target_posts.append(TargetPost(effective_date=date, text=text, media=media))

        return target_posts

    async def _process_images(
        self,
        items: List[SourceMediaItem],
        archive_folder: Union[str, Path],
        include_caption: bool
    ) -> List[NormalizedMediaUnit]:
        return list(await asyncio.gather(*(
            process_image_item(item, archive_folder, self.collaborators, include_caption)
            for item in items
        )))

    async def _process_video(
        self,
        item: SourceMediaItem,
        archive_folder: Union[str, Path],
        include_caption: bool
    ) -> List[NormalizedMediaUnit]:
        return [await process_video_item(item, archive_folder, self.collaborators, include_caption)]


async def split_post(
    post: SourcePost,
    archive_folder: Union[str, Path],
    collaborators: MediaCollaborators = DEFAULT_COLLABORATORS
) -> List[TargetPost]:
    """Convenience wrapper around ``PostSplitter(collaborators).split``."""
    return await PostSplitter(collaborators).split(post, archive_folder)
