"""
Mangrove Watch - Crowdsource Module
Report drafts, location capture, submission, and user feedback.
"""

from mangrove_watch.crowdsource.operations import OperationResult, OperationState
from mangrove_watch.crowdsource.notifications import (
    Notifier,
    Toast,
    ToastQueue,
    ToastVariant,
)
from mangrove_watch.crowdsource.geolocation import (
    Coordinate,
    GeolocationProvider,
    FixedGeolocationProvider,
    IPGeolocationProvider,
    LocationCapture,
)
from mangrove_watch.crowdsource.report_handler import (
    Reporter,
    PhotoUpload,
    ReportDraft,
    ReportSubmitter,
    default_display_name,
)

__all__ = [
    # Operations
    "OperationResult",
    "OperationState",
    # Notifications
    "Notifier",
    "Toast",
    "ToastQueue",
    "ToastVariant",
    # Geolocation
    "Coordinate",
    "GeolocationProvider",
    "FixedGeolocationProvider",
    "IPGeolocationProvider",
    "LocationCapture",
    # Report Handler
    "Reporter",
    "PhotoUpload",
    "ReportDraft",
    "ReportSubmitter",
    "default_display_name",
]
