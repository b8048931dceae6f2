"""
Presentation views built from link and access-log snapshots.
"""

from .collection import (
    FILTERS,
    SORT_KEYS,
    build_log_table,
    build_view,
    recent_links,
)

__all__ = ["FILTERS", "SORT_KEYS", "build_log_table", "build_view", "recent_links"]
