"""
Database module for Mangrove Watch
Report and profile persistence
"""

from .connection import DatabaseConnection, init_db
from .models import Base, IncidentReport, Profile
from .repository import ReportRepository, ProfileRepository

__all__ = [
    "DatabaseConnection",
    "init_db",
    "Base",
    "IncidentReport",
    "Profile",
    "ReportRepository",
    "ProfileRepository",
]
