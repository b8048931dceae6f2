"""
Analytics over access-log and link snapshots.
"""

from .aggregator import (
    NO_DATA,
    DashboardStats,
    active_count,
    clicks_on,
    dashboard_stats,
    top_link,
    total_clicks,
    unique_visitors,
)

__all__ = [
    "NO_DATA",
    "DashboardStats",
    "active_count",
    "clicks_on",
    "dashboard_stats",
    "top_link",
    "total_clicks",
    "unique_visitors",
]
