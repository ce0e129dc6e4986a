"""
Post timestamps, date-range filtering and chronological ordering.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .models import SourcePost


def from_timestamp(seconds: int) -> datetime:
    """Convert epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def effective_timestamp(post: SourcePost) -> Optional[datetime]:
    """
    Resolve the date a post was created.

    Uses the post-level timestamp, falling back to the first media item's.
    A zero timestamp is treated as missing, as the export uses it for
    entries it has no date for.

    Args:
        post: Source post

    Returns:
        Aware UTC datetime, or None if no timestamp is available
    """
    if post.creation_timestamp:
        return from_timestamp(post.creation_timestamp)

    if post.media and post.media[0].creation_timestamp:
        return from_timestamp(post.media[0].creation_timestamp)

    return None


def within_range(
    date: datetime,
    min_date: Optional[datetime] = None,
    max_date: Optional[datetime] = None
) -> bool:
    """
    Check whether ``date`` falls inside ``[min_date, max_date)``.

    Either bound may be None to leave that side open.
    """
    if min_date is not None and date < min_date:
        return False
    if max_date is not None and date >= max_date:
        return False
    return True


def _sort_key(post: SourcePost):
    date = effective_timestamp(post)
    # Undated posts sort after every dated one
    return (date is None, date.timestamp() if date else 0.0)


def compare_for_sort(a: SourcePost, b: SourcePost) -> int:
    """
    Three-way comparison of two posts by effective timestamp.

    Posts without a timestamp compare greater than dated posts and equal
    to each other.

    Returns:
        Negative if ``a`` sorts first, positive if ``b`` does, else 0
    """
    key_a, key_b = _sort_key(a), _sort_key(b)
    return (key_a > key_b) - (key_a < key_b)


def sort_posts(posts: Iterable[SourcePost]) -> List[SourcePost]:
    """Return posts in ascending chronological order (stable, undated last)."""
    return sorted(posts, key=_sort_key)
