"""
Fleet Console State
===================
Author: AMHUB Member
Date: 2026-10-18

Wires the pipeline together for a front end:

    Poller -> DeviceSnapshot -> MarkerReconciler -> DeckMapSurface
                            +-> SelectionController

The poller writes `snapshot`, `health`, `last_poll_time` and `loading`
from its event loop; the front end only reads them and calls
`sync_map()` to reconcile markers on its own thread, so the map surface
has exactly one writer.

Usage:
    console = FleetConsole(get_config())
    runtime.call(console.start_polling)
    ...
    console.sync_map()
    st.pydeck_chart(console.surface.to_deck())
"""

import logging
import weakref
from typing import Any, Callable, List, Optional

import pandas as pd

from amhub.core.config import Config
from amhub.core.geocoder import search_target
from amhub.fleet.client import FleetClient
from amhub.fleet.models import EMPTY_SNAPSHOT, DeviceSnapshot, LinkHealth, LinkStatus, Unhealthy
from amhub.fleet.poller import Poller
from amhub.mapping.reconciler import MarkerOperation, MarkerReconciler, MarkerStates
from amhub.mapping.surface import FOLLOW_ZOOM, DeckMapSurface
from .alerts import AlertWorkflow
from .event_log import EventLog
from .selection import SelectionController, TargetCoordinate

logger = logging.getLogger("AMHUB.Console")


def _weak_callback(method: Callable[[Any], None]) -> Callable[[Any], None]:
    """Poller callback that does not keep the console alive."""
    ref = weakref.WeakMethod(method)

    def forward(value: Any) -> None:
        target = ref()
        if target is not None:
            target(value)

    forward.__name__ = method.__name__
    return forward


LINK_LABELS = {
    LinkStatus.HEALTHY: "LIVE LINK",
    LinkStatus.UNAUTHORIZED: "UNAUTHORIZED",
    LinkStatus.UNHEALTHY: "OFFLINE",
}

DEVICE_TABLE_COLUMNS = [
    "Nickname", "Model", "Serial", "Status", "Battery %",
    "Latitude", "Longitude", "Height (m)", "Speed (m/s)",
]


def snapshot_to_frame(snapshot: DeviceSnapshot) -> pd.DataFrame:
    """Device list table; devices without telemetry show empty readings."""
    rows = []
    for device in snapshot:
        t = device.telemetry
        rows.append({
            "Nickname": device.nickname,
            "Model": device.model,
            "Serial": device.serial_number,
            "Status": "ONLINE" if device.is_online else ("OFFLINE" if t is not None else "NO SIGNAL"),
            "Battery %": t.battery_percent if t is not None else None,
            "Latitude": t.latitude if t is not None else None,
            "Longitude": t.longitude if t is not None else None,
            "Height (m)": t.height if t is not None else None,
            "Speed (m/s)": t.speed if t is not None else None,
        })
    return pd.DataFrame(rows, columns=DEVICE_TABLE_COLUMNS)


class FleetConsole:
    """Per-operator console state."""

    def __init__(
        self,
        config: Config,
        client: Optional[FleetClient] = None,
        surface: Optional[DeckMapSurface] = None,
        event_log: Optional[EventLog] = None,
    ):
        self.config = config
        self.client = client or FleetClient(config)
        self.event_log = event_log or EventLog()

        target = TargetCoordinate(config.default_latitude, config.default_longitude)
        self.surface = surface or DeckMapSurface(center=target.position)
        self.surface.set_target(target.position)
        self.reconciler = MarkerReconciler(self.surface)
        self.marker_states: MarkerStates = {}
        self._rendered: Optional[DeviceSnapshot] = None

        self.snapshot: DeviceSnapshot = EMPTY_SNAPSHOT
        self.health: LinkHealth = Unhealthy("No poll completed yet")
        self.last_poll_time: float = 0.0
        self.loading = False

        self.selection = SelectionController(
            snapshot_source=lambda: self.snapshot,
            target=target,
            on_recenter=self._fly_to,
            event_log=self.event_log,
        )
        self.alerts = AlertWorkflow(self.client.send_workflow_alert, config, self.event_log)
        self.poller = Poller(self.client.fetch_topology, interval_ms=config.poll_interval_ms)

    # =========================================================================
    # Polling (event loop thread)
    # =========================================================================

    def start_polling(self) -> None:
        self.poller.start(
            self.config.poll_interval_ms,
            on_snapshot=_weak_callback(self._on_snapshot),
            on_health=_weak_callback(self._on_health),
            on_loading=_weak_callback(self._on_loading),
        )

    def stop_polling(self) -> None:
        self.poller.stop()

    def refresh(self) -> None:
        self.poller.refresh()

    def _on_snapshot(self, snapshot: DeviceSnapshot) -> None:
        self.snapshot = snapshot
        self.last_poll_time = self.poller.last_poll_time

    def _on_health(self, health: LinkHealth) -> None:
        self.health = health

    def _on_loading(self, loading: bool) -> None:
        self.loading = loading

    @property
    def link_label(self) -> str:
        return LINK_LABELS[self.health.status]

    # =========================================================================
    # Map (front-end thread)
    # =========================================================================

    def sync_map(self) -> List[MarkerOperation]:
        """Reconcile markers against the latest snapshot, once per snapshot."""
        snapshot = self.snapshot
        if snapshot is self._rendered:
            return []
        operations, self.marker_states = self.reconciler.reconcile(self.marker_states, snapshot)
        self._rendered = snapshot
        return operations

    def open_popup(self, serial_number: str) -> None:
        _, self.marker_states = self.reconciler.open_popup(self.marker_states, serial_number)

    def close_popup(self, serial_number: str) -> None:
        _, self.marker_states = self.reconciler.close_popup(self.marker_states, serial_number)

    def serial_for_handle(self, handle: str) -> Optional[str]:
        """Device serial behind a picked map marker, if it is still shown."""
        for serial, state in self.marker_states.items():
            if state.handle == handle:
                return serial
        return None

    def set_basemap(self, basemap: str) -> None:
        self.surface.basemap = basemap

    def _fly_to(self, position) -> None:
        self.surface.recenter(position, FOLLOW_ZOOM, animated=True)

    # =========================================================================
    # Selection and target
    # =========================================================================

    def select_device(self, serial_number: str):
        return self.selection.select_device(serial_number)

    def deselect(self) -> None:
        self.selection.deselect()

    def copy_to_target(self) -> bool:
        changed = self.selection.copy_to_target()
        if changed:
            self.surface.set_target(self.selection.target.position)
        return changed

    def set_target(self, latitude: float, longitude: float, rounded: bool = False) -> TargetCoordinate:
        target = self.selection.set_target(latitude, longitude, rounded=rounded)
        self.surface.set_target(target.position)
        return target

    def search_target(self, query: str) -> bool:
        """Geocode a place name and move the target there."""
        result = search_target(query)
        if result is None:
            return False
        self.set_target(*result)
        return True

    # =========================================================================
    # Alerts and settings
    # =========================================================================

    def trigger_alert(self, requester: str, level: int, description: str):
        return self.alerts.trigger(self.selection.target, requester, level, description)

    def apply_settings(self, config: Config) -> None:
        """In-session settings edit; takes effect on the next fetch/send."""
        self.config = config
        self.client.config = config
        self.alerts.config = config
        logger.info("Console settings updated")

    def device_table(self) -> pd.DataFrame:
        return snapshot_to_frame(self.snapshot)
