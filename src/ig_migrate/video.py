"""
Video size validation and dimension probing via ffprobe.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Union

from .constants import DEFAULT_VIDEO_DIMENSION, VIDEO_MAX_BYTES
from .exceptions import MediaProbeError
from .models import AspectRatio

logger = logging.getLogger(__name__)

FFPROBE_COMMAND = "ffprobe"


def validate_video_size(data: bytes, max_bytes: int = VIDEO_MAX_BYTES) -> bool:
    """
    Check a video against the upload size ceiling.

    Args:
        data: Raw video bytes
        max_bytes: Hard ceiling in bytes

    Returns:
        True if the video may be uploaded
    """
    size_mb = round(len(data) / 1024 / 1024)
    logger.debug(f"Validating video size: {size_mb}MB")

    if len(data) > max_bytes:
        logger.warning(
            f"Video file too large: {size_mb}MB (max {max_bytes // 1024 // 1024}MB)"
        )
        return False
    return True


async def video_dimensions(path: Union[str, Path]) -> AspectRatio:
    """
    Read the frame size of the first video stream with ffprobe.

    Args:
        path: Path to the video file

    Returns:
        AspectRatio of the first video stream; a missing width or height
        falls back to the default dimension

    Raises:
        MediaProbeError: If ffprobe fails or finds no video stream
    """
    logger.debug(f"Getting video dimensions for: {path}")
    cmd = [
        FFPROBE_COMMAND,
        '-v', 'quiet',
        '-print_format', 'json',
        '-show_streams',
        str(path),
    ]

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
    except OSError as e:
        raise MediaProbeError("Failed to run ffprobe", details=str(e), path=str(path))

    if process.returncode != 0:
        raise MediaProbeError(
            "ffprobe failed",
            details=stderr.decode('utf-8', errors='replace').strip() or f"exit code {process.returncode}",
            path=str(path),
        )

    try:
        probe_data = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise MediaProbeError("Failed to parse ffprobe output", details=str(e), path=str(path))

    for stream in probe_data.get('streams', []):
        if stream.get('codec_type') == 'video':
            dimensions = AspectRatio(
                width=stream.get('width') or DEFAULT_VIDEO_DIMENSION,
                height=stream.get('height') or DEFAULT_VIDEO_DIMENSION,
            )
            logger.debug(f"Video dimensions: {dimensions.width}x{dimensions.height}")
            return dimensions

    raise MediaProbeError("No video stream found", path=str(path))
