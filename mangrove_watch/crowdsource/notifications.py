"""
User feedback notifications (toasts).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class ToastVariant(str, Enum):
    """Visual weight of a toast."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Toast:
    """One user-facing message."""
    title: str
    message: str
    variant: ToastVariant = ToastVariant.DEFAULT
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "message": self.message,
            "variant": self.variant.value,
            "created_at": self.created_at.isoformat(),
        }


class Notifier(ABC):
    """Sink accepting (title, message, variant)."""

    @abstractmethod
    def notify(
        self,
        title: str,
        message: str,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        """Show a message to the user."""


class ToastQueue(Notifier):
    """Collects toasts until the client drains them."""

    def __init__(self):
        self._toasts: List[Toast] = []

    def notify(
        self,
        title: str,
        message: str,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        toast = Toast(title=title, message=message, variant=variant)
        self._toasts.append(toast)

        if variant is ToastVariant.DESTRUCTIVE:
            logger.warning(f"{title}: {message}")
        else:
            logger.info(f"{title}: {message}")
        return toast

    @property
    def pending(self) -> List[Toast]:
        return list(self._toasts)

    def drain(self) -> List[Toast]:
        """Return and clear all pending toasts."""
        toasts, self._toasts = self._toasts, []
        return toasts
