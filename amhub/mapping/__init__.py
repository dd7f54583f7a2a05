"""
Mapping Module for AMHUB
========================
Author: AMHUB Member
Date: 2026-10-18

Live map side of the console: marker presentation, the map surface and
the incremental marker reconciler.
"""

from .markers import (
    IconSignature,
    MarkerIcon,
    drone_icon,
    icon_signature,
    render_popup,
)
from .surface import (
    BASEMAPS,
    FOLLOW_ZOOM,
    DeckMapSurface,
    MapSurface,
    haversine_m,
)
from .reconciler import (
    MarkerOperation,
    MarkerReconciler,
    MarkerState,
    OperationKind,
    is_renderable,
)

__all__ = [
    "IconSignature",
    "MarkerIcon",
    "drone_icon",
    "icon_signature",
    "render_popup",
    "BASEMAPS",
    "FOLLOW_ZOOM",
    "DeckMapSurface",
    "MapSurface",
    "haversine_m",
    "MarkerOperation",
    "MarkerReconciler",
    "MarkerState",
    "OperationKind",
    "is_renderable",
]
