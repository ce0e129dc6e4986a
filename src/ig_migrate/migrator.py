"""
Migrator for coordinating an Instagram to Bluesky migration run.

This module provides the Migrator class that loads the export, filters and
orders posts, splits them concurrently and hands the results to an
uploader one post at a time.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from .archive import load_posts
from .config import MigratorConfig
from .constants import ESTIMATE_OVERHEAD_FACTOR
from .dates import effective_timestamp, sort_posts, within_range
from .exceptions import ConfigurationError, MissingTimestampError
from .logger import log_exception
from .models import SourcePost, TargetPost
from .processors import DEFAULT_COLLABORATORS, MediaCollaborators
from .splitter import PostSplitter
from .storage import write_plan
from .upload import SimulatedUploader, Uploader, prepare_for_upload

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """Format a duration as "H hours and M minutes"."""
    minutes = int(seconds // 60)
    hours, remaining_minutes = divmod(minutes, 60)
    return f"{hours} hours and {remaining_minutes} minutes"


def estimate_import_time(media_count: int, upload_delay: float) -> str:
    """Estimate how long a real import of ``media_count`` media would take."""
    return format_duration(media_count * upload_delay * ESTIMATE_OVERHEAD_FACTOR)


@dataclass
class MigrationStats:
    """
    Statistics from a migration run.

    Attributes:
        total_posts: Posts found in the export
        skipped_no_date: Posts without a resolvable timestamp
        skipped_out_of_range: Posts outside the configured date window
        failed_posts: Posts whose splitting failed unexpectedly
        target_posts: Posts produced by splitting
        uploaded_posts: Posts handed to the uploader successfully
        uploaded_media: Media items in uploaded posts
        dropped_posts: Target posts dropped during upload preparation
        failed_uploads: Posts the uploader raised on
        start_time: When the run started
        end_time: When the run completed
        simulated: Whether nothing was published
    """
    total_posts: int = 0
    skipped_no_date: int = 0
    skipped_out_of_range: int = 0
    failed_posts: int = 0
    target_posts: int = 0
    uploaded_posts: int = 0
    uploaded_media: int = 0
    dropped_posts: int = 0
    failed_uploads: int = 0
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None
    simulated: bool = True

    @property
    def duration_seconds(self) -> float:
        end = self.end_time or datetime.now(timezone.utc)
        return (end - self.start_time).total_seconds()

    def __str__(self) -> str:
        """Format statistics as a human-readable string."""
        return (
            f"Posts in export:   {self.total_posts}\n"
            f"Skipped (no date): {self.skipped_no_date}\n"
            f"Skipped (range):   {self.skipped_out_of_range}\n"
            f"Failed to split:   {self.failed_posts}\n"
            f"Target posts:      {self.target_posts}\n"
            f"Uploaded posts:    {self.uploaded_posts}\n"
            f"Uploaded media:    {self.uploaded_media}\n"
            f"Duration:          {format_duration(self.duration_seconds)}"
        )


class Migrator:
    """
    Orchestrates a complete migration run.

    Workflow:
    1. Load posts from the export
    2. Sort chronologically and apply the date window
    3. Split accepted posts concurrently (bounded by ``config.concurrency``)
    4. Optionally write the migration plan
    5. Prepare and upload each target post in order, pausing
       ``config.upload_delay`` seconds between uploads

    Example:
        ```python
        config = MigratorConfig(archive_folder=Path("instagram-export"))
        migrator = Migrator(config)
        stats = await migrator.run()
        print(stats)
        ```
    """

    def __init__(
        self,
        config: MigratorConfig,
        uploader: Optional[Uploader] = None,
        collaborators: MediaCollaborators = DEFAULT_COLLABORATORS
    ):
        """
        Initialize the migrator.

        Args:
            config: Migration configuration
            uploader: Destination for posts; defaults to a SimulatedUploader
                in simulate mode
            collaborators: Archive and metadata services for the splitter

        Raises:
            ConfigurationError: If not simulating and no uploader is given
        """
        if uploader is None:
            if not config.simulate:
                raise ConfigurationError(
                    "No uploader available",
                    details="only simulate mode is supported without an uploader",
                )
            uploader = SimulatedUploader()

        self.config = config
        self.uploader = uploader
        self.splitter = PostSplitter(collaborators)
        self._stats = MigrationStats(simulated=config.simulate)

    async def run(self) -> MigrationStats:
        """
        Run the migration.

        Returns:
            MigrationStats describing the run

        Raises:
            ExportFormatError: If the export cannot be read
        """
        stats = self._stats
        stats.start_time = datetime.now(timezone.utc)
        logger.info(f"Migration started at {stats.start_time.isoformat()}")
        logger.info(
            f"Source folder: {self.config.archive_folder}, "
            f"MIN_DATE: {self.config.min_date}, MAX_DATE: {self.config.max_date}, "
            f"SIMULATE: {self.config.simulate}"
        )

        posts = await load_posts(self.config.archive_folder)
        stats.total_posts = len(posts)

        accepted = self.select_posts(posts)
        target_posts = await self.split_all(accepted)
        stats.target_posts = len(target_posts)

        if self.config.plan_file:
            path = await write_plan(target_posts, self.config.plan_file, self.config.archive_folder)
            logger.info(f"Migration plan written to {path}")

        await self.upload_all(target_posts)

        stats.end_time = datetime.now(timezone.utc)

        if self.config.simulate:
            logger.info(
                "Estimated time for real import: "
                f"{estimate_import_time(stats.uploaded_media, self.config.upload_delay)}"
            )

        logger.info(
            f"Migration finished at {stats.end_time.isoformat()}, "
            f"imported {stats.uploaded_posts} posts with {stats.uploaded_media} media"
        )
        logger.info(f"Total migration time: {format_duration(stats.duration_seconds)}")
        return stats

    def select_posts(self, posts: List[SourcePost]) -> List[SourcePost]:
        """
        Order posts chronologically and drop those without a date or
        outside the configured window.
        """
        accepted = []

        for post in sort_posts(posts):
            post_date = effective_timestamp(post)

            if post_date is None:
                logger.warning("Skipping post - No date")
                self._stats.skipped_no_date += 1
                continue

            if not within_range(post_date, self.config.min_date, self.config.max_date):
                logger.warning(f"Skipping post - Outside date range: [{post_date.isoformat()}]")
                self._stats.skipped_out_of_range += 1
                continue

            accepted.append(post)

        logger.info(f"{len(accepted)} of {len(posts)} posts selected for migration")
        return accepted

    async def split_all(self, posts: List[SourcePost]) -> List[TargetPost]:
        """
        Split posts concurrently, keeping their chronological order.

        A post that fails to split is logged and skipped.
        """
        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def split_one(index: int, post: SourcePost) -> List[TargetPost]:
            async with semaphore:
                try:
                    return await self.splitter.split(post, self.config.archive_folder)
                except MissingTimestampError:
                    logger.warning("Skipping post - No date")
                    self._stats.skipped_no_date += 1
                except Exception as e:
                    log_exception(logger, f"Failed to process post #{index}", e)
                    self._stats.failed_posts += 1
                return []

        results = await asyncio.gather(*(split_one(i, post) for i, post in enumerate(posts)))

        target_posts: List[TargetPost] = []
        for split in results:
            target_posts.extend(split)
        return target_posts

    async def upload_all(self, posts: List[TargetPost]) -> None:
        """Prepare and upload posts one at a time, in order."""
        stats = self._stats

        for position, post in enumerate(posts):
            prepared = await prepare_for_upload(post)
            if prepared is None:
                stats.dropped_posts += 1
                continue

            if not self.config.simulate and position > 0 and self.config.upload_delay > 0:
                await asyncio.sleep(self.config.upload_delay)

            try:
                post_url = await self.uploader.upload(prepared)
            except Exception as e:
                logger.error(f"Failed to create post from {prepared.effective_date.isoformat()}: {e}")
                stats.failed_uploads += 1
                continue

            if post_url:
                logger.info(f"Post created with url: {post_url}")

            stats.uploaded_posts += 1
            stats.uploaded_media += len(prepared.media)
