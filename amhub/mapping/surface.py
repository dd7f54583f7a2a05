"""
Map Surface
===========
Author: AMHUB Member
Date: 2026-10-18

The map collaborator the marker reconciler drives. `MapSurface` is the
interface; `DeckMapSurface` keeps the marker table in memory and renders
it as a pydeck Deck for the Streamlit console.
"""

import itertools
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set, Tuple

import pydeck as pdk

from .markers import ICON_SIZE, MarkerIcon

logger = logging.getLogger("AMHUB.MapSurface")

Position = Tuple[float, float]

DEFAULT_ZOOM = 13
FOLLOW_ZOOM = 19

# (map_provider, map_style) per basemap
BASEMAPS = {
    "streets": ("carto", "road"),
    "satellite": ("mapbox", "mapbox://styles/mapbox/satellite-streets-v12"),
}

TARGET_COLOR = [239, 68, 68, 230]
MARKER_LAYER_ID = "drones"
TARGET_LAYER_ID = "target"


def haversine_m(a: Position, b: Position) -> float:
    """Great-circle distance in meters between two (lat, lon) points."""
    r = 6371000.0
    p1 = math.radians(a[0])
    p2 = math.radians(b[0])
    dp = math.radians(b[0] - a[0])
    dl = math.radians(b[1] - a[1])
    h = math.sin(dp / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2.0) ** 2
    return 2.0 * r * math.asin(math.sqrt(max(0.0, min(1.0, h))))


class MapSurface(ABC):
    """Operations a live map exposes to the marker reconciler."""

    @abstractmethod
    def create_marker(self, position: Position, icon: MarkerIcon, z_index: int) -> str:
        """Add a marker and return its handle."""

    @abstractmethod
    def update_marker(
        self,
        handle: str,
        position: Optional[Position] = None,
        icon: Optional[MarkerIcon] = None,
        z_index: Optional[int] = None,
    ) -> None:
        """Change only the given attributes of a marker."""

    @abstractmethod
    def remove_marker(self, handle: str) -> None:
        """Remove a marker and release its resources."""

    @abstractmethod
    def bind_popup(self, handle: str, content: str) -> None:
        """Set the content shown the next time the popup opens."""

    @abstractmethod
    def open_popup(self, handle: str, content: Optional[str] = None) -> None:
        """Open the popup, optionally replacing its content."""

    @abstractmethod
    def update_popup(self, handle: str, content: str) -> None:
        """Replace the content of an open popup in place."""

    @abstractmethod
    def close_popup(self, handle: str) -> None:
        """Close the popup."""

    @abstractmethod
    def recenter(self, position: Position, zoom: float, animated: bool = True) -> None:
        """Move the view."""


@dataclass(frozen=True)
class RenderedMarker:
    position: Position
    icon: MarkerIcon
    z_index: int
    popup_content: str = ""


@dataclass(frozen=True)
class ViewState:
    latitude: float
    longitude: float
    zoom: float = DEFAULT_ZOOM
    animated: bool = False


class DeckMapSurface(MapSurface):
    """
    In-memory map surface rendered with pydeck.

    Streamlit redraws the whole chart on every rerun, so the marker table
    lives here and `to_deck()` turns it into layers. Open popups are shown
    by the console as a detail card next to the map.
    """

    def __init__(self, center: Position, zoom: float = DEFAULT_ZOOM, basemap: str = "streets"):
        self._markers: Dict[str, RenderedMarker] = {}
        self._open_popups: Set[str] = set()
        self._handles = itertools.count(1)
        self.view = ViewState(latitude=center[0], longitude=center[1], zoom=zoom)
        self.target: Optional[Position] = None
        self.basemap = basemap

    # =========================================================================
    # Marker table
    # =========================================================================

    def create_marker(self, position: Position, icon: MarkerIcon, z_index: int) -> str:
        handle = f"marker-{next(self._handles)}"
        self._markers[handle] = RenderedMarker(position=position, icon=icon, z_index=z_index)
        return handle

    def update_marker(self, handle, position=None, icon=None, z_index=None) -> None:
        marker = self._require(handle)
        changes = {}
        if position is not None:
            changes["position"] = position
        if icon is not None:
            changes["icon"] = icon
        if z_index is not None:
            changes["z_index"] = z_index
        if changes:
            self._markers[handle] = replace(marker, **changes)

    def remove_marker(self, handle: str) -> None:
        self._require(handle)
        self._open_popups.discard(handle)
        del self._markers[handle]

    def bind_popup(self, handle: str, content: str) -> None:
        self._markers[handle] = replace(self._require(handle), popup_content=content)

    def open_popup(self, handle: str, content: Optional[str] = None) -> None:
        if content is not None:
            self.bind_popup(handle, content)
        else:
            self._require(handle)
        self._open_popups.add(handle)

    def update_popup(self, handle: str, content: str) -> None:
        self.bind_popup(handle, content)

    def close_popup(self, handle: str) -> None:
        self._require(handle)
        self._open_popups.discard(handle)

    def recenter(self, position: Position, zoom: float, animated: bool = True) -> None:
        logger.debug(f"Recenter -> ({position[0]:.6f}, {position[1]:.6f}) zoom {zoom}")
        self.view = ViewState(latitude=position[0], longitude=position[1], zoom=zoom, animated=animated)

    def _require(self, handle: str) -> RenderedMarker:
        try:
            return self._markers[handle]
        except KeyError:
            raise KeyError(f"Unknown marker handle: {handle}") from None

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    def marker(self, handle: str) -> Optional[RenderedMarker]:
        return self._markers.get(handle)

    def is_popup_open(self, handle: str) -> bool:
        return handle in self._open_popups

    def open_popup_contents(self) -> List[str]:
        return [self._markers[h].popup_content for h in sorted(self._open_popups) if h in self._markers]

    def set_target(self, position: Position, follow_distance_m: float = 500.0) -> None:
        """Move the alert target marker; far jumps also move the view."""
        previous = self.target
        self.target = position
        if previous is not None and haversine_m(previous, position) > follow_distance_m:
            self.recenter(position, self.view.zoom, animated=True)

    def marker_rows(self) -> List[dict]:
        """One row per marker, lowest z-index first so online drones draw on top."""
        rows = []
        for handle, m in sorted(self._markers.items(), key=lambda item: item[1].z_index):
            rows.append({
                "handle": handle,
                "lat": m.position[0],
                "lon": m.position[1],
                # deck.gl angles are counter-clockwise, yaw is clockwise from north
                "angle": -m.icon.rotation,
                "popup": m.popup_content,
                "icon_data": {
                    "url": m.icon.data_url(),
                    "width": m.icon.size * 2,
                    "height": m.icon.size * 2,
                    "anchorY": m.icon.size,
                },
            })
        return rows

    def to_deck(self) -> pdk.Deck:
        """Build the pydeck chart for the current frame."""
        layers = [
            pdk.Layer(
                "IconLayer",
                id=MARKER_LAYER_ID,
                data=self.marker_rows(),
                get_icon="icon_data",
                get_position="[lon, lat]",
                get_angle="angle",
                get_size=ICON_SIZE,
                size_units="pixels",
                pickable=True,
            )
        ]
        if self.target is not None:
            layers.append(
                pdk.Layer(
                    "ScatterplotLayer",
                    id=TARGET_LAYER_ID,
                    data=[{"lat": self.target[0], "lon": self.target[1], "popup": "<b>TARGET ORIGIN</b>"}],
                    get_position="[lon, lat]",
                    get_radius=8,
                    radius_units="pixels",
                    get_fill_color=TARGET_COLOR,
                    pickable=True,
                )
            )

        provider, style = BASEMAPS.get(self.basemap, BASEMAPS["streets"])
        view = pdk.ViewState(
            latitude=self.view.latitude,
            longitude=self.view.longitude,
            zoom=self.view.zoom,
            transition_duration=1500 if self.view.animated else 0,
        )
        return pdk.Deck(
            map_provider=provider,
            map_style=style,
            initial_view_state=view,
            layers=layers,
            tooltip={"html": "{popup}"},
        )

