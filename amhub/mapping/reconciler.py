"""
Marker Reconciler
=================
Author: AMHUB Member
Date: 2026-10-18

Moves the rendered marker set from the previous frame to the current
snapshot with the fewest surface mutations:

- CREATE   device renderable, no marker yet
- MOVE     coordinates changed (zero-distance updates are skipped)
- RESTYLE  online state, yaw or z-order changed
- REFRESH_POPUP  popup open and its content changed (updated in place)
- REBIND_POPUP   popup closed and its content changed
- CLOSE_POPUP / REMOVE  device gone or no longer renderable

Identity is the serial number, never list position. The marker table is
an explicit dict owned by the caller and passed in; it is never mutated,
a new one is returned.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Mapping, Tuple

from amhub.fleet.models import Device, DeviceSnapshot
from .markers import IconSignature, drone_icon, icon_signature, render_popup
from .surface import MapSurface, Position

logger = logging.getLogger("AMHUB.Reconciler")


class OperationKind(Enum):
    CREATE = "create"
    MOVE = "move"
    RESTYLE = "restyle"
    REFRESH_POPUP = "refresh_popup"
    REBIND_POPUP = "rebind_popup"
    OPEN_POPUP = "open_popup"
    CLOSE_POPUP = "close_popup"
    REMOVE = "remove"


@dataclass(frozen=True)
class MarkerOperation:
    """One mutation applied to the map surface."""
    kind: OperationKind
    serial_number: str
    handle: str


@dataclass(frozen=True)
class MarkerState:
    """What the reconciler last rendered for one serial."""
    handle: str
    position: Position
    icon_signature: IconSignature
    popup_content: str
    popup_open: bool = False


MarkerStates = Dict[str, MarkerState]


def is_renderable(device: Device) -> bool:
    """Drawn only with telemetry and a real fix; 0,0 is the no-fix sentinel."""
    return device.has_fix


class MarkerReconciler:
    """
    Set-difference reconciliation of device markers against a MapSurface.

    Example:
        >>> reconciler = MarkerReconciler(surface)
        >>> ops, states = reconciler.reconcile({}, snapshot)
        >>> ops, states = reconciler.reconcile(states, snapshot)
        >>> ops
        []
    """

    def __init__(self, surface: MapSurface, popup_renderer: Callable[[Device], str] = render_popup):
        self.surface = surface
        self.popup_renderer = popup_renderer

    def reconcile(
        self,
        previous: Mapping[str, MarkerState],
        snapshot: DeviceSnapshot,
    ) -> Tuple[List[MarkerOperation], MarkerStates]:
        """
        Apply the snapshot to the surface.

        Args:
            previous: Marker states returned by the last call (not mutated)
            snapshot: Current device snapshot

        Returns:
            (operations applied, new marker states)
        """
        operations: List[MarkerOperation] = []
        current: MarkerStates = {}

        for device in snapshot:
            if not is_renderable(device):
                continue
            serial = device.serial_number
            # A repeated serial within one snapshot updates the marker just placed
            existing = current.get(serial) or previous.get(serial)
            if existing is None:
                current[serial] = self._create(device, operations)
            else:
                current[serial] = self._update(device, existing, operations)

        for serial, state in previous.items():
            if serial not in current:
                self._remove(serial, state, operations)

        if operations:
            logger.debug(
                f"Reconciled {len(current)} marker(s): "
                + ", ".join(f"{op.kind.value}:{op.serial_number}" for op in operations)
            )
        return operations, current

    # =========================================================================
    # User popup actions
    # =========================================================================

    def open_popup(self, states: Mapping[str, MarkerState], serial: str) -> Tuple[List[MarkerOperation], MarkerStates]:
        """Open a marker's detail overlay. Unknown serials are a no-op."""
        state = states.get(serial)
        if state is None or state.popup_open:
            return [], dict(states)
        self.surface.open_popup(state.handle, state.popup_content)
        updated = dict(states)
        updated[serial] = replace(state, popup_open=True)
        return [MarkerOperation(OperationKind.OPEN_POPUP, serial, state.handle)], updated

    def close_popup(self, states: Mapping[str, MarkerState], serial: str) -> Tuple[List[MarkerOperation], MarkerStates]:
        """Close a marker's detail overlay. Unknown serials are a no-op."""
        state = states.get(serial)
        if state is None or not state.popup_open:
            return [], dict(states)
        self.surface.close_popup(state.handle)
        updated = dict(states)
        updated[serial] = replace(state, popup_open=False)
        return [MarkerOperation(OperationKind.CLOSE_POPUP, serial, state.handle)], updated

    # =========================================================================
    # Internals
    # =========================================================================

    def _create(self, device: Device, operations: List[MarkerOperation]) -> MarkerState:
        position = device.telemetry.position
        signature = icon_signature(device)
        content = self.popup_renderer(device)

        handle = self.surface.create_marker(position, drone_icon(signature), signature.z_index)
        self.surface.bind_popup(handle, content)
        operations.append(MarkerOperation(OperationKind.CREATE, device.serial_number, handle))

        return MarkerState(
            handle=handle,
            position=position,
            icon_signature=signature,
            popup_content=content,
        )

    def _update(self, device: Device, state: MarkerState, operations: List[MarkerOperation]) -> MarkerState:
        serial = device.serial_number
        handle = state.handle
        changes = {}

        position = device.telemetry.position
        if position != state.position:
            self.surface.update_marker(handle, position=position)
            operations.append(MarkerOperation(OperationKind.MOVE, serial, handle))
            changes["position"] = position

        signature = icon_signature(device)
        if signature != state.icon_signature:
            self.surface.update_marker(handle, icon=drone_icon(signature), z_index=signature.z_index)
            operations.append(MarkerOperation(OperationKind.RESTYLE, serial, handle))
            changes["icon_signature"] = signature

        content = self.popup_renderer(device)
        if content != state.popup_content:
            if state.popup_open:
                # Open overlay is updated in place, never closed and reopened
                self.surface.update_popup(handle, content)
                operations.append(MarkerOperation(OperationKind.REFRESH_POPUP, serial, handle))
            else:
                self.surface.bind_popup(handle, content)
                operations.append(MarkerOperation(OperationKind.REBIND_POPUP, serial, handle))
            changes["popup_content"] = content

        return replace(state, **changes) if changes else state

    def _remove(self, serial: str, state: MarkerState, operations: List[MarkerOperation]) -> None:
        if state.popup_open:
            self.surface.close_popup(state.handle)
            operations.append(MarkerOperation(OperationKind.CLOSE_POPUP, serial, state.handle))
        self.surface.remove_marker(state.handle)
        operations.append(MarkerOperation(OperationKind.REMOVE, serial, state.handle))
