"""
Incident report submission for Mangrove Watch

Takes a report draft from a community member, uploads the optional photo,
stores the report, and credits the member's conservation points.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Optional

from mangrove_watch.core.constants import INCIDENT_TYPES, PHOTO_KEY_PREFIX, SEVERITY_LEVELS
from mangrove_watch.core.exceptions import MangroveWatchError, ValidationError
from mangrove_watch.crowdsource.geolocation import Coordinate
from mangrove_watch.crowdsource.notifications import Notifier, ToastVariant
from mangrove_watch.crowdsource.operations import OperationResult, OperationState
from mangrove_watch.database.repository import ProfileRepository, ReportRepository
from mangrove_watch.storage.blob_store import BlobStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reporter:
    """The signed-in community member."""
    user_id: str
    email: Optional[str] = None


def default_display_name(email: Optional[str]) -> str:
    """Local part of the email, or 'Anonymous'."""
    if email and email.split("@")[0]:
        return email.split("@")[0]
    return "Anonymous"


@dataclass
class PhotoUpload:
    """Photo evidence attached to a draft."""
    filename: str
    data: bytes
    content_type: Optional[str] = None


@dataclass
class ReportDraft:
    """
    A report being composed.

    The location comes either from location capture or from a map click.
    """
    title: str = ""
    description: str = ""
    incident_type: str = "other"
    severity: str = "medium"
    photo: Optional[PhotoUpload] = None
    location: Optional[Coordinate] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def set_location(self, latitude: float, longitude: float) -> None:
        self.location = Coordinate(latitude=latitude, longitude=longitude)

    def reset(self) -> None:
        self.title = ""
        self.description = ""
        self.incident_type = "other"
        self.severity = "medium"
        self.photo = None
        self.location = None
        self.metadata = {}

    def validate(self) -> None:
        """
        Raises:
            ValidationError: If a required field is missing
        """
        if not self.title.strip():
            raise ValidationError("Incident title is required")
        if not self.description.strip():
            raise ValidationError("Description is required")
        if self.location is None:
            raise ValidationError(
                "Location is required. Capture your location or pick it on the map."
            )
        if self.severity not in SEVERITY_LEVELS:
            raise ValidationError(f"Unknown severity: {self.severity}")
        if self.incident_type not in INCIDENT_TYPES:
            raise ValidationError(f"Unknown incident type: {self.incident_type}")


def photo_key(filename: str, timestamp_ms: int) -> str:
    """Storage key for a report photo."""
    name = PurePosixPath(filename.replace("\\", "/")).name or "photo"
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name)
    return f"{PHOTO_KEY_PREFIX}/{timestamp_ms}_{name}"


class ReportSubmitter:
    """
    Submits report drafts.

    Two writes happen in order: the report insert, then the profile credit.
    The state moves IDLE -> PENDING -> SUCCESS | FAILURE.
    """

    def __init__(
        self,
        reports: ReportRepository,
        profiles: ProfileRepository,
        blob_store: BlobStore,
        notifier: Notifier,
        points_per_report: int = 10,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize report submitter.

        Args:
            reports: Report record store
            profiles: Profile record store
            blob_store: Photo storage
            notifier: Toast sink for user feedback
            points_per_report: Points credited per submitted report
            clock: Source of the current time in seconds (photo keys)
        """
        self.reports = reports
        self.profiles = profiles
        self.blob_store = blob_store
        self.notifier = notifier
        self.points_per_report = points_per_report
        self.clock = clock
        self.state = OperationState.IDLE

    @property
    def is_busy(self) -> bool:
        return self.state is OperationState.PENDING

    async def submit(self, reporter: Reporter, draft: ReportDraft) -> OperationResult:
        """
        Submit a draft.

        Args:
            reporter: Signed-in member
            draft: Report draft; reset after a successful submission

        Returns:
            OperationResult with the stored report on success
        """
        if self.is_busy:
            return OperationResult.failure("A report submission is already in progress")

        self.state = OperationState.PENDING
        try:
            return await self._submit(reporter, draft)
        finally:
            if self.state is OperationState.PENDING:
                self.state = OperationState.FAILURE

    async def _submit(self, reporter: Reporter, draft: ReportDraft) -> OperationResult:
        try:
            draft.validate()
            photo_url = await self._upload_photo(draft.photo)
            report = self._store_report(reporter, draft, photo_url)
            self._credit_points(reporter)
        except MangroveWatchError as e:
            self.state = OperationState.FAILURE
            logger.error(f"Report submission failed for {reporter.user_id}: {e}")
            self.notifier.notify("Error submitting report", str(e), ToastVariant.DESTRUCTIVE)
            return OperationResult.failure(str(e), e)

        self.state = OperationState.SUCCESS
        self.notifier.notify(
            "Report submitted!",
            f"Your incident has been submitted. You earned {self.points_per_report} points!",
        )
        draft.reset()
        return OperationResult.success(report)

    async def _upload_photo(self, photo: Optional[PhotoUpload]) -> Optional[str]:
        if photo is None:
            return None

        key = photo_key(photo.filename, int(self.clock() * 1000))
        stored = await self.blob_store.upload(key, photo.data, photo.content_type)
        return stored.url

    def _store_report(
        self,
        reporter: Reporter,
        draft: ReportDraft,
        photo_url: Optional[str],
    ) -> Dict[str, Any]:
        return self.reports.insert(
            user_id=reporter.user_id,
            title=draft.title.strip(),
            description=draft.description.strip(),
            latitude=draft.location.latitude,
            longitude=draft.location.longitude,
            incident_type=draft.incident_type or "other",
            severity=draft.severity,
            status="pending",
            photos=[photo_url] if photo_url else [],
        )

    def _credit_points(self, reporter: Reporter) -> Dict[str, Any]:
        if self.profiles.get(reporter.user_id) is None:
            self.profiles.create(reporter.user_id, default_display_name(reporter.email))
        return self.profiles.credit_report(reporter.user_id, self.points_per_report)
