"""
SQLAlchemy models for Mangrove Watch
"""

import json
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class IncidentReport(Base):
    """
    Incident report submitted by a community member.

    Photos are stored as a JSON list of URLs.
    """
    __tablename__ = "mangrove_reports"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(100), nullable=False, index=True)

    # Report details
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    incident_type = Column(String(50), nullable=False, default="other")
    severity = Column(String(20), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="pending")

    # Location
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    photos_json = Column(Text, nullable=False, default="[]")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_report_created_at", created_at),
        Index("idx_report_status", status),
    )

    @property
    def photos(self) -> list:
        return json.loads(self.photos_json or "[]")

    @photos.setter
    def photos(self, urls: list) -> None:
        self.photos_json = json.dumps(list(urls))

    def __repr__(self):
        return f"<IncidentReport({self.id}, severity={self.severity}, status={self.status})>"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "incident_type": self.incident_type,
            "severity": self.severity,
            "status": self.status,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "photos": self.photos,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Profile(Base):
    """Community member profile with gamification counters."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(100), nullable=False, unique=True, index=True)

    display_name = Column(String(100), nullable=False)
    user_role = Column(String(50), nullable=False, default="community_member")

    points = Column(Integer, nullable=False, default=0)
    total_reports = Column(Integer, nullable=False, default=0)
    verified_reports = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile({self.user_id}, points={self.points})>"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "user_role": self.user_role,
            "points": self.points,
            "total_reports": self.total_reports,
            "verified_reports": self.verified_reports,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
