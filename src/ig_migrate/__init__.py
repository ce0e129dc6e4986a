"""
Instagram to Bluesky Migrator - Republish an Instagram data export on Bluesky.

Reads the posts of an extracted Instagram export and splits each one into
posts that respect Bluesky's media limits, in chronological order.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import MigratorConfig, load_config
from .exceptions import (
    ArchiveReadError,
    ConfigurationError,
    ExportFormatError,
    MediaProbeError,
    MigratorError,
    MissingTimestampError,
)
from .migrator import MigrationStats, Migrator
from .models import (
    AspectRatio,
    GeoTag,
    NormalizedMediaUnit,
    SourceMediaItem,
    SourcePost,
    TargetPost,
)
from .splitter import PostSplitter, split_post
from .upload import SimulatedUploader, Uploader

__all__ = [
    "__version__",
    "__license__",
    # Configuration
    "MigratorConfig",
    "load_config",
    # Core components
    "Migrator",
    "MigrationStats",
    "PostSplitter",
    "split_post",
    "Uploader",
    "SimulatedUploader",
    # Models
    "GeoTag",
    "AspectRatio",
    "SourceMediaItem",
    "SourcePost",
    "NormalizedMediaUnit",
    "TargetPost",
    # Exceptions
    "MigratorError",
    "ConfigurationError",
    "ExportFormatError",
    "ArchiveReadError",
    "MediaProbeError",
    "MissingTimestampError",
]
