"""
Selection / Sync Controller
===========================
Author: AMHUB Member
Date: 2026-10-18

Tracks the single selected drone and the alert target coordinate.

The selection is a weak reference: only the serial is stored and it is
resolved against the latest snapshot on every read. A serial that has
dropped out of the snapshot resolves to None ("no telemetry") until the
operator deselects.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from amhub.fleet.models import Device, DeviceSnapshot
from .event_log import EventLog

logger = logging.getLogger("AMHUB.Selection")

COORDINATE_PRECISION = 6


@dataclass(frozen=True)
class TargetCoordinate:
    """Alert target; independent of any device."""
    latitude: float
    longitude: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


def round_coordinate(value: float, precision: int = COORDINATE_PRECISION) -> float:
    return round(float(value), precision)


class SelectionController:
    """
    Selected-device and target state for the mission panel.

    Args:
        snapshot_source: Returns the latest published snapshot
        target: Initial target coordinate
        on_recenter: Called once per selection with the device position
        event_log: Operator log for selection/sync events
    """

    def __init__(
        self,
        snapshot_source: Callable[[], DeviceSnapshot],
        target: TargetCoordinate,
        on_recenter: Optional[Callable[[Tuple[float, float]], None]] = None,
        event_log: Optional[EventLog] = None,
        precision: int = COORDINATE_PRECISION,
    ):
        self._snapshot_source = snapshot_source
        self._on_recenter = on_recenter
        self._event_log = event_log
        self.precision = precision
        self.selected_serial: Optional[str] = None
        self.target = target

    @property
    def selected_device(self) -> Optional[Device]:
        """The selected device in the latest snapshot, or None (never raises)."""
        return self._snapshot_source().get(self.selected_serial)

    def select_device(self, serial_number: str) -> Optional[Device]:
        """
        Select a device and recenter on it once if it has a position fix.

        Later telemetry updates do not recenter again.
        """
        self.selected_serial = serial_number
        device = self.selected_device
        if device is None:
            logger.debug(f"Selected {serial_number}, not in current snapshot")
            return None

        if device.has_fix:
            if self._on_recenter is not None:
                self._on_recenter(device.telemetry.position)
            self._log(f"Uplink established with drone: {device.nickname}")
        return device

    def deselect(self) -> None:
        self.selected_serial = None

    def copy_to_target(self) -> bool:
        """
        Copy the selected drone's live position into the target.

        Returns:
            True if the target changed; False for no selection, a stale
            selection or a device without telemetry.
        """
        device = self.selected_device
        if device is None or device.telemetry is None:
            return False

        self.target = TargetCoordinate(
            latitude=round_coordinate(device.telemetry.latitude, self.precision),
            longitude=round_coordinate(device.telemetry.longitude, self.precision),
        )
        self._log(f"Coordinates synchronized to drone: {device.nickname}")
        return True

    def set_target(self, latitude: float, longitude: float, rounded: bool = False) -> TargetCoordinate:
        """Manual edit, search result or map click; map clicks pass rounded=True."""
        if rounded:
            latitude = round_coordinate(latitude, self.precision)
            longitude = round_coordinate(longitude, self.precision)
        self.target = TargetCoordinate(latitude=float(latitude), longitude=float(longitude))
        return self.target

    def _log(self, message: str) -> None:
        if self._event_log is not None:
            self._event_log.info(message)
        else:
            logger.info(message)
