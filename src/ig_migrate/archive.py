"""
Archive reader for Instagram exports.

Locates the posts JSON inside an extracted "Download your information"
archive, parses it into SourcePost models and reads media bytes.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

import aiofiles
from pydantic import ValidationError

from .constants import POSTS_JSON_CANDIDATES
from .exceptions import ArchiveReadError, ExportFormatError
from .models import SourcePost
from .text import decode

logger = logging.getLogger(__name__)


def media_path(archive_folder: Union[str, Path], uri: str) -> Path:
    """Absolute path of an archive-relative media URI."""
    return Path(archive_folder) / uri


async def read_bytes(archive_folder: Union[str, Path], uri: str) -> bytes:
    """
    Read a media file from the archive.

    Args:
        archive_folder: Root of the extracted export
        uri: Path relative to ``archive_folder``

    Returns:
        Raw file contents

    Raises:
        ArchiveReadError: If the file is missing or unreadable
    """
    path = media_path(archive_folder, uri)

    try:
        async with aiofiles.open(path, 'rb') as f:
            return await f.read()
    except FileNotFoundError as e:
        raise ArchiveReadError("Media file not found", details=str(e), uri=uri)
    except OSError as e:
        raise ArchiveReadError("Failed to read media file", details=str(e), uri=uri)


def find_posts_file(archive_folder: Union[str, Path]) -> Path:
    """
    Locate the posts JSON inside an export.

    Args:
        archive_folder: Root of the extracted export

    Returns:
        Path of the first candidate file that exists

    Raises:
        ExportFormatError: If no posts JSON is found
    """
    archive_folder = Path(archive_folder)

    for candidate in POSTS_JSON_CANDIDATES:
        path = archive_folder / candidate
        if path.is_file():
            logger.debug(f"Using posts file {path}")
            return path

    raise ExportFormatError(
        "No posts JSON found in archive",
        details="looked for " + ", ".join(POSTS_JSON_CANDIDATES),
        path=str(archive_folder),
    )


async def load_posts(archive_folder: Union[str, Path]) -> List[SourcePost]:
    """
    Load and parse every post of an export.

    The whole JSON tree is run through the text repair before parsing.
    Entries that fail validation are logged and skipped.

    Args:
        archive_folder: Root of the extracted export

    Returns:
        Posts in file order

    Raises:
        ExportFormatError: If the posts file is missing or not a JSON list
    """
    path = find_posts_file(archive_folder)

    try:
        async with aiofiles.open(path, 'r', encoding='utf-8') as f:
            raw = json.loads(await f.read())
    except json.JSONDecodeError as e:
        raise ExportFormatError("Invalid JSON in posts file", details=str(e), path=str(path))
    except OSError as e:
        raise ExportFormatError("Failed to read posts file", details=str(e), path=str(path))

    if not isinstance(raw, list):
        raise ExportFormatError(
            "Posts file must contain a list of posts",
            details=f"got {type(raw).__name__}",
            path=str(path),
        )

    entries = decode(raw)
    posts: List[SourcePost] = []

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping post #{index} - not an object")
            continue
        try:
            posts.append(SourcePost.from_export(entry))
        except ValidationError as e:
            logger.warning(f"Skipping post #{index} - invalid entry: {e.error_count()} error(s)")
            logger.debug(str(e))

    logger.info(f"Loaded {len(posts)} posts from {path}")
    return posts
