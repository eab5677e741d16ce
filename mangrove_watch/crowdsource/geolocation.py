"""
Current-location capture for report drafts.

Browsers hand the service a coordinate directly; without one the service
can fall back to an IP geolocation lookup.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from mangrove_watch.core.exceptions import GeolocationError
from mangrove_watch.crowdsource.notifications import Notifier, ToastVariant
from mangrove_watch.crowdsource.operations import OperationResult, OperationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinate:
    """A (latitude, longitude) pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise GeolocationError("Coordinate must be finite")

    def display(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


class GeolocationProvider(ABC):
    """Source of the user's current coordinate."""

    @abstractmethod
    async def get_current_coordinate(self) -> Coordinate:
        """
        Raises:
            GeolocationError: If the location cannot be determined
        """


class FixedGeolocationProvider(GeolocationProvider):
    """Provider that returns a coordinate supplied by the client."""

    def __init__(self, coordinate: Optional[Coordinate] = None):
        self.coordinate = coordinate

    async def get_current_coordinate(self) -> Coordinate:
        if self.coordinate is None:
            raise GeolocationError("Location permission denied or unavailable")
        return self.coordinate


class IPGeolocationProvider(GeolocationProvider):
    """
    Approximate location from the caller's IP address.

    Uses the ip-api.com JSON endpoint (no key needed, coarse accuracy).
    """

    def __init__(
        self,
        url: str = "http://ip-api.com/json/",
        timeout: float = 10.0,
        ip_address: Optional[str] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.ip_address = ip_address

    async def get_current_coordinate(self) -> Coordinate:
        url = f"{self.url.rstrip('/')}/{self.ip_address}" if self.ip_address else self.url
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"IP geolocation request failed: {e}")
            raise GeolocationError(f"Geolocation lookup failed: {e}") from e

        if data.get("status") != "success":
            raise GeolocationError(data.get("message") or "Geolocation lookup failed")

        try:
            return Coordinate(latitude=float(data["lat"]), longitude=float(data["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeolocationError(f"Malformed geolocation response: {e}") from e


class LocationCapture:
    """
    Capture the current location with user feedback.

    State moves IDLE -> PENDING -> SUCCESS | FAILURE; a new capture can start
    from any state except PENDING. A captured coordinate is stored on the
    draft, when one is given.
    """

    def __init__(self, provider: GeolocationProvider, notifier: Notifier, draft=None):
        self.provider = provider
        self.notifier = notifier
        self.draft = draft
        self.state = OperationState.IDLE
        self.coordinate: Optional[Coordinate] = None

    @property
    def is_busy(self) -> bool:
        return self.state is OperationState.PENDING

    async def capture(self) -> OperationResult:
        if self.is_busy:
            return OperationResult.failure("Location capture already in progress")

        self.state = OperationState.PENDING
        try:
            return await self._capture()
        finally:
            if self.state is OperationState.PENDING:
                self.state = OperationState.FAILURE

    async def _capture(self) -> OperationResult:
        try:
            coordinate = await self.provider.get_current_coordinate()
        except GeolocationError as e:
            self.state = OperationState.FAILURE
            self.notifier.notify(
                "Location error",
                "Could not capture your location. Please try again.",
                ToastVariant.DESTRUCTIVE,
            )
            return OperationResult.failure(str(e), e)

        self.coordinate = coordinate
        if self.draft is not None:
            self.draft.location = coordinate
        self.state = OperationState.SUCCESS
        self.notifier.notify(
            "Location captured!",
            "Your current location has been captured successfully.",
        )
        return OperationResult.success(coordinate)
