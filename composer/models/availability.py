"""Engine availability as reported by the probe."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AvailabilityStatus(Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class UnavailableReason(Enum):
    """Why the engine cannot be used on this host."""
    DEVICE_INELIGIBLE = "device-ineligible"
    CAPABILITY_DISABLED = "capability-disabled"
    NOT_READY = "not-ready"
    OTHER = "other"


@dataclass(frozen=True)
class EngineAvailability:
    """Result of one availability probe.

    ``reason`` is only set when ``status`` is UNAVAILABLE. ``detail`` carries
    whatever the engine said, for logs; it is never shown to the user as-is.
    """
    status: AvailabilityStatus
    reason: Optional[UnavailableReason] = None
    detail: str = ""

    @classmethod
    def available(cls) -> "EngineAvailability":
        return cls(AvailabilityStatus.AVAILABLE)

    @classmethod
    def unavailable(cls, reason: UnavailableReason, detail: str = "") -> "EngineAvailability":
        return cls(AvailabilityStatus.UNAVAILABLE, reason, detail)

    @classmethod
    def unknown(cls, detail: str = "") -> "EngineAvailability":
        return cls(AvailabilityStatus.UNKNOWN, None, detail)

    @property
    def is_available(self) -> bool:
        return self.status == AvailabilityStatus.AVAILABLE
