"""
Record store access for reports and profiles.

Repositories return plain dictionaries so callers never hold on to
session-bound objects.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection
from .models import IncidentReport, Profile

logger = logging.getLogger(__name__)


class ReportRepository:
    """CRUD over incident reports."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def insert(
        self,
        user_id: str,
        title: str,
        description: str,
        latitude: float,
        longitude: float,
        incident_type: str = "other",
        severity: str = "medium",
        status: str = "pending",
        photos: Optional[List[str]] = None,
        created_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Insert a report.

        Returns:
            The stored report as a dictionary

        Raises:
            StoreError: On database failure
        """
        with self.db.get_session() as session:
            report = IncidentReport(
                user_id=user_id,
                title=title,
                description=description,
                incident_type=incident_type,
                severity=severity,
                status=status,
                latitude=latitude,
                longitude=longitude,
                created_at=created_at or datetime.utcnow(),
            )
            report.photos = photos or []
            session.add(report)
            session.flush()
            stored = report.to_dict()

        logger.info(f"Report {stored['id']} stored for user {user_id}")
        return stored

    def get(self, report_id: str) -> Optional[Dict[str, Any]]:
        with self.db.get_session() as session:
            report = session.get(IncidentReport, report_id)
            return report.to_dict() if report else None

    def list_recent(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """All reports, newest first."""
        with self.db.get_session() as session:
            query = session.query(IncidentReport).order_by(
                IncidentReport.created_at.desc()
            )
            if limit is not None:
                query = query.limit(limit)
            return [r.to_dict() for r in query.all()]

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Reports of one user, newest first."""
        with self.db.get_session() as session:
            query = (
                session.query(IncidentReport)
                .filter(IncidentReport.user_id == user_id)
                .order_by(IncidentReport.created_at.desc())
            )
            return [r.to_dict() for r in query.all()]


class ProfileRepository:
    """CRUD over user profiles."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self.db.get_session() as session:
            profile = session.query(Profile).filter(Profile.user_id == user_id).one_or_none()
            return profile.to_dict() if profile else None

    def create(
        self,
        user_id: str,
        display_name: str,
        user_role: str = "community_member",
    ) -> Dict[str, Any]:
        with self.db.get_session() as session:
            profile = Profile(
                user_id=user_id,
                display_name=display_name,
                user_role=user_role,
                points=0,
                total_reports=0,
                verified_reports=0,
            )
            session.add(profile)
            session.flush()
            stored = profile.to_dict()

        logger.info(f"Profile created for user {user_id}")
        return stored

    def credit_report(self, user_id: str, points: int) -> Optional[Dict[str, Any]]:
        """
        Add points and one report to a profile.

        Returns:
            Updated profile, or None if the user has no profile
        """
        with self.db.get_session() as session:
            profile = session.query(Profile).filter(Profile.user_id == user_id).one_or_none()
            if profile is None:
                return None
            profile.points = (profile.points or 0) + points
            profile.total_reports = (profile.total_reports or 0) + 1
            session.flush()
            updated = profile.to_dict()

        logger.info(f"User {user_id} credited {points} points")
        return updated
