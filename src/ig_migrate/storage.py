"""
Storage utilities for the migration plan file.

The plan is written atomically (temp file + rename) so an interrupted run
never leaves a truncated JSON file behind.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Union

import aiofiles

from .models import TargetPost


async def atomic_write(filepath: Union[str, Path], content: str) -> None:
    """
    Write content to file atomically using temp file and rename.

    Args:
        filepath: Target file path
        content: String content to write

    Raises:
        OSError: If write or rename fails

    Example:
        ```python
        await atomic_write("plan.json", json_content)
        ```
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    # Same directory as the target so the rename stays on one filesystem
    fd, temp_path = tempfile.mkstemp(
        dir=filepath.parent,
        prefix=f".{filepath.name}.",
        suffix=".tmp"
    )
    os.close(fd)

    try:
        async with aiofiles.open(temp_path, 'w', encoding='utf-8') as f:
            await f.write(content)
        os.replace(temp_path, filepath)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


async def write_plan(
    posts: Iterable[TargetPost],
    path: Union[str, Path],
    archive_folder: Union[str, Path]
) -> Path:
    """
    Write the list of target posts as JSON.

    Media payloads are described (type, size, alt text, aspect ratio)
    but not embedded.

    Args:
        posts: Target posts in upload order
        path: Destination file
        archive_folder: Export the posts were read from

    Returns:
        Path of the written file
    """
    post_dicts = [post.to_plan_dict() for post in posts]
    document = {
        "archive_folder": str(archive_folder),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "total_posts": len(post_dicts),
        "total_media": sum(len(post["media"]) for post in post_dicts),
        "posts": post_dicts,
    }

    path = Path(path)
    await atomic_write(path, json.dumps(document, indent=2, ensure_ascii=False))
    return path
