"""
Fleet Data Model
================
Author: AMHUB Member
Date: 2026-10-18

Immutable device records produced by the normalizer, and the tagged
link-health union produced by the poller.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Union

AERIAL_DOMAIN = "aerial"

NO_DRONES_MESSAGE = "No drones detected"
SUCCESS_MESSAGE = "Success"


@dataclass(frozen=True)
class DeviceTelemetry:
    """Live kinematic/status readings of one device. Missing readings are 0."""
    latitude: float = 0.0
    longitude: float = 0.0
    height: float = 0.0
    speed: float = 0.0
    battery_percent: float = 0.0
    link_signal_quality: float = 0.0
    flight_time_seconds: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    @property
    def has_fix(self) -> bool:
        """False for the 0,0 "no fix" sentinel."""
        return self.latitude != 0 or self.longitude != 0


@dataclass(frozen=True)
class Device:
    """
    One aerial vehicle as seen in a single poll.

    serial_number is the identity across poll cycles. telemetry is None
    for a device with neither a position fix nor an online link
    ("no signal"), which is different from online with all-zero readings.
    """
    serial_number: str
    nickname: str
    model: str
    is_online: bool
    telemetry: Optional[DeviceTelemetry] = None
    domain: str = AERIAL_DOMAIN
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def has_fix(self) -> bool:
        return self.telemetry is not None and self.telemetry.has_fix


@dataclass(frozen=True)
class DeviceSnapshot:
    """
    Ordered, immutable result of one successful poll.

    Order is upstream order. Upstream serials are not contractually
    unique, so lookups resolve to the last occurrence.
    """
    devices: Tuple[Device, ...] = ()
    message: str = NO_DRONES_MESSAGE
    code: int = 0

    def __iter__(self) -> Iterator[Device]:
        return iter(self.devices)

    def __len__(self) -> int:
        return len(self.devices)

    def get(self, serial_number: Optional[str]) -> Optional[Device]:
        """Find a device by serial; None when absent (never raises)."""
        if serial_number is None:
            return None
        for device in reversed(self.devices):
            if device.serial_number == serial_number:
                return device
        return None

    def serials(self) -> Tuple[str, ...]:
        return tuple(d.serial_number for d in self.devices)

    @property
    def online_count(self) -> int:
        return sum(1 for d in self.devices if d.is_online)


EMPTY_SNAPSHOT = DeviceSnapshot()


# =============================================================================
# Link Health
# =============================================================================

class LinkStatus(Enum):
    """Aggregate outcome of a poll cycle."""
    HEALTHY = "healthy"
    UNAUTHORIZED = "unauthorized"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class Healthy:
    """Structurally valid response; carries the snapshot it produced."""
    snapshot: DeviceSnapshot
    polled_at: float
    status: LinkStatus = field(default=LinkStatus.HEALTHY, init=False)


@dataclass(frozen=True)
class Unauthorized:
    """Upstream rejected the credentials; last snapshot stays on screen."""
    reason: str = ""
    status: LinkStatus = field(default=LinkStatus.UNAUTHORIZED, init=False)


@dataclass(frozen=True)
class Unhealthy:
    """Network, shape or API failure; last snapshot stays on screen."""
    reason: str = ""
    status: LinkStatus = field(default=LinkStatus.UNHEALTHY, init=False)


LinkHealth = Union[Healthy, Unauthorized, Unhealthy]
