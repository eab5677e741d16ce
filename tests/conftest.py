"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mangrove_watch.core.config import Settings
from mangrove_watch.crowdsource.notifications import ToastQueue
from mangrove_watch.database import DatabaseConnection, ProfileRepository, ReportRepository
from mangrove_watch.storage import LocalBlobStore
from mangrove_watch.visualization import MapReport


@pytest.fixture
def sample_reports():
    """Two reports, one with a severity outside the closed set."""
    return [
        MapReport(
            id="1",
            latitude=10.0,
            longitude=20.0,
            title="Dumping",
            incident_type="dumping",
            severity="critical",
        ),
        MapReport(
            id="2",
            latitude=11.0,
            longitude=21.0,
            title="Debris",
            incident_type="pollution",
            severity="unknown",
        ),
    ]


@pytest.fixture
def sundarbans_reports():
    """Reports around the Sundarbans delta."""
    return [
        MapReport(id="sb-1", latitude=21.9497, longitude=89.1833,
                  title="Illegal cutting", incident_type="illegal_cutting", severity="high"),
        MapReport(id="sb-2", latitude=21.8012, longitude=88.8551,
                  title="Oil sheen", incident_type="pollution", severity="medium"),
        MapReport(id="sb-3", latitude=22.0401, longitude=88.9902,
                  title="Embankment breach", incident_type="land_reclamation", severity="low"),
    ]


@pytest.fixture
def db():
    """In-memory database with tables."""
    connection = DatabaseConnection("sqlite://")
    connection.create_tables()
    yield connection
    connection.close()


@pytest.fixture
def report_repo(db):
    return ReportRepository(db)


@pytest.fixture
def profile_repo(db):
    return ProfileRepository(db)


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "uploads", base_url="/uploads")


@pytest.fixture
def notifier():
    return ToastQueue()


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment and the working directory."""
    return Settings(
        database_url="sqlite://",
        upload_dir=str(tmp_path / "uploads"),
        upload_base_url="/uploads",
        credential_store_dir=str(tmp_path / "credentials"),
        mapbox_access_token=None,
        points_per_report=10,
    )
