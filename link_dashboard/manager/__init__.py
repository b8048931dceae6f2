"""
Orchestration of service fetches and the dashboard core.
"""

from .dashboard_manager import (
    AnalyticsReport,
    DashboardManager,
    DashboardReport,
    FetchResult,
    LinksReport,
)

__all__ = ["AnalyticsReport", "DashboardManager", "DashboardReport", "FetchResult", "LinksReport"]
