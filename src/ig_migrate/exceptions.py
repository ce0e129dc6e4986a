"""
Centralized exception hierarchy for the Instagram migrator.

Only configuration problems and a missing export are fatal to a run. Every
other error is caught at the item or post boundary and degrades to dropping
that item or post.
"""

from typing import Optional


class MigratorError(Exception):
    """
    Base exception for all migrator errors.

    All custom exceptions in the migrator inherit from this class,
    allowing for broad exception handling when needed.
    """

    def __init__(self, message: str, details: Optional[str] = None):
        """
        Initialize the exception.

        Args:
            message: Primary error message
            details: Additional details or context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(MigratorError):
    """
    Raised when configuration validation fails.

    Examples:
        - Missing archive folder
        - MIN_DATE later than MAX_DATE
        - Credentials missing outside of simulate mode
    """
    pass


class ExportFormatError(MigratorError):
    """
    Raised when the export cannot be located or parsed.

    Examples:
        - No posts JSON found in the archive folder
        - Posts JSON is not a list of posts
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        path: Optional[str] = None
    ):
        super().__init__(message, details)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})" + (
                f": {self.details}" if self.details else ""
            )
        return super().__str__()


class ArchiveReadError(MigratorError):
    """
    Raised when a media file cannot be read from the archive.

    Item processors convert this into an unusable media unit; it never
    propagates past them.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        uri: Optional[str] = None
    ):
        """
        Initialize archive read error.

        Args:
            message: Primary error message
            details: Additional details about the error
            uri: Archive-relative URI of the media file
        """
        super().__init__(message, details)
        self.uri = uri

    def __str__(self) -> str:
        """Return formatted error message with the offending URI."""
        parts = [self.message]

        if self.uri:
            parts.append(f"(uri: {self.uri})")

        if self.details:
            parts.append(f"- {self.details}")

        return " ".join(parts)


class MediaProbeError(MigratorError):
    """Raised when ffprobe cannot determine video dimensions."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        path: Optional[str] = None
    ):
        super().__init__(message, details)
        self.path = path


class MissingTimestampError(MigratorError):
    """
    Raised when a post has no resolvable creation timestamp.

    Fatal to that post only; the migrator skips it and continues.
    """
    pass


__all__ = [
    "MigratorError",
    "ConfigurationError",
    "ExportFormatError",
    "ArchiveReadError",
    "MediaProbeError",
    "MissingTimestampError",
]
