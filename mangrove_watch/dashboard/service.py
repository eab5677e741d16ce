"""
Dashboard state for a signed-in member.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from mangrove_watch.core.constants import (
    MUTED_BADGE_CLASS,
    RECENT_REPORTS_LIMIT,
    SEVERITY_BADGE_CLASSES,
    STATUS_BADGE_CLASSES,
    USER_ROLES,
)
from mangrove_watch.core.exceptions import StoreError
from mangrove_watch.crowdsource.notifications import Notifier, ToastVariant
from mangrove_watch.crowdsource.report_handler import Reporter, default_display_name
from mangrove_watch.database.repository import ProfileRepository, ReportRepository
from mangrove_watch.visualization.backends import MapReport

logger = logging.getLogger(__name__)


class DashboardTab(str, Enum):
    OVERVIEW = "overview"
    MAP = "map"
    REPORTS = "reports"
    PROFILE = "profile"


def severity_badge_class(severity: Optional[str]) -> str:
    return SEVERITY_BADGE_CLASSES.get(severity, MUTED_BADGE_CLASS)


def status_badge_class(status: Optional[str]) -> str:
    return STATUS_BADGE_CLASSES.get(status, MUTED_BADGE_CLASS)


@dataclass
class OverviewStats:
    """Overview tab counters."""
    total_reports: int = 0
    verified_reports: int = 0
    points: int = 0
    community_reports: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_reports": self.total_reports,
            "verified_reports": self.verified_reports,
            "points": self.points,
            "community_reports": self.community_reports,
        }


@dataclass
class DashboardState:
    """Everything the dashboard tabs render."""
    profile: Optional[Dict[str, Any]]
    reports: List[Dict[str, Any]] = field(default_factory=list)
    stats: OverviewStats = field(default_factory=OverviewStats)

    @property
    def recent_reports(self) -> List[Dict[str, Any]]:
        return self.reports[:RECENT_REPORTS_LIMIT]

    @property
    def map_reports(self) -> List[MapReport]:
        return [MapReport.from_record(r) for r in self.reports]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile,
            "stats": self.stats.to_dict(),
            "recent_reports": [
                {
                    **r,
                    "severity_badge": severity_badge_class(r.get("severity")),
                    "status_badge": status_badge_class(r.get("status")),
                }
                for r in self.recent_reports
            ],
            "reports": self.reports,
        }

    def tab(self, tab: DashboardTab) -> Dict[str, Any]:
        """Data one tab renders."""
        data = self.to_dict()
        if tab is DashboardTab.OVERVIEW:
            return {"stats": data["stats"], "recent_reports": data["recent_reports"]}
        if tab is DashboardTab.MAP:
            return {"reports": [asdict(r) for r in self.map_reports]}
        if tab is DashboardTab.REPORTS:
            return {"reports": data["reports"]}
        return {"profile": data["profile"], "stats": data["stats"]}


class DashboardService:
    """
    Loads profile and report state.

    Store errors become toasts; the dashboard renders with whatever loaded.
    """

    def __init__(
        self,
        reports: ReportRepository,
        profiles: ProfileRepository,
        notifier: Notifier,
    ):
        self.reports = reports
        self.profiles = profiles
        self.notifier = notifier

    def load(self, reporter: Reporter) -> DashboardState:
        profile = self.load_profile(reporter)
        reports = self.load_reports()
        return DashboardState(
            profile=profile,
            reports=reports,
            stats=self.overview_stats(profile, reports),
        )

    def load_profile(self, reporter: Reporter) -> Optional[Dict[str, Any]]:
        """Fetch the member's profile, creating it on first visit."""
        try:
            profile = self.profiles.get(reporter.user_id)
            if profile is None:
                profile = self.profiles.create(
                    reporter.user_id,
                    default_display_name(reporter.email),
                    user_role=USER_ROLES[0],
                )
        except StoreError as e:
            self.notifier.notify(
                "Error fetching profile", str(e), ToastVariant.DESTRUCTIVE
            )
            return None
        return profile

    def load_reports(self) -> List[Dict[str, Any]]:
        """All community reports, newest first."""
        try:
            return self.reports.list_recent()
        except StoreError as e:
            self.notifier.notify(
                "Error fetching reports", str(e), ToastVariant.DESTRUCTIVE
            )
            return []

    @staticmethod
    def overview_stats(
        profile: Optional[Dict[str, Any]],
        reports: List[Dict[str, Any]],
    ) -> OverviewStats:
        profile = profile or {}
        return OverviewStats(
            total_reports=profile.get("total_reports") or 0,
            verified_reports=profile.get("verified_reports") or 0,
            points=profile.get("points") or 0,
            community_reports=len(reports),
        )
