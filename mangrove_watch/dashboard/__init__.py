"""
Mangrove Watch - Dashboard Module
"""

from mangrove_watch.dashboard.service import (
    DashboardService,
    DashboardState,
    DashboardTab,
    OverviewStats,
    severity_badge_class,
    status_badge_class,
)

__all__ = [
    "DashboardService",
    "DashboardState",
    "DashboardTab",
    "OverviewStats",
    "severity_badge_class",
    "status_badge_class",
]
