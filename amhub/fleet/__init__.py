"""
Fleet Module for AMHUB
======================
Author: AMHUB Member
Date: 2026-10-18

Upstream side of the console: topology client, telemetry normalization,
device model and the link-health poller.
"""

from .errors import (
    AlertError,
    AuthError,
    StructureError,
    TransportError,
    UpstreamError,
    ValidationSkip,
)
from .models import (
    AERIAL_DOMAIN,
    EMPTY_SNAPSHOT,
    Device,
    DeviceSnapshot,
    DeviceTelemetry,
    Healthy,
    LinkHealth,
    LinkStatus,
    Unauthorized,
    Unhealthy,
)
from .normalizer import normalize
from .client import FleetClient
from .poller import Poller

__all__ = [
    # Errors
    "AlertError",
    "AuthError",
    "StructureError",
    "TransportError",
    "UpstreamError",
    "ValidationSkip",

    # Model
    "AERIAL_DOMAIN",
    "EMPTY_SNAPSHOT",
    "Device",
    "DeviceSnapshot",
    "DeviceTelemetry",
    "Healthy",
    "LinkHealth",
    "LinkStatus",
    "Unauthorized",
    "Unhealthy",

    # Pipeline
    "normalize",
    "FleetClient",
    "Poller",
]
