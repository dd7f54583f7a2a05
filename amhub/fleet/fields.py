"""
Topology Field Rules
====================
Author: AMHUB Member
Date: 2026-10-18

The upstream host record names the same reading differently depending on
device generation and firmware. Each field is described as an ordered list
of accessors evaluated first-match-wins, so every fallback chain can be
inspected and tested on its own.

Example:
    >>> HEIGHT.resolve({"device_state": {"elevation": 87.5}})
    87.5
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

# Sentinel for "this accessor found nothing"
MISSING = object()

Accessor = Callable[[Mapping], Any]

_MODEL_KEY_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


# =============================================================================
# Accessors
# =============================================================================

def path(*keys) -> Accessor:
    """
    Build an accessor that walks nested mappings (str keys) and lists (int keys).

    None values count as missing, matching how the upstream omits readings.
    """
    def access(record: Mapping) -> Any:
        node: Any = record
        for key in keys:
            if isinstance(key, int):
                if not isinstance(node, (list, tuple)) or not -len(node) <= key < len(node):
                    return MISSING
                node = node[key]
            else:
                if not isinstance(node, Mapping) or key not in node:
                    return MISSING
                node = node[key]
            if node is None:
                return MISSING
        return node

    access.__name__ = "path(" + ", ".join(repr(k) for k in keys) + ")"
    return access


def model_key_prefix(record: Mapping) -> Any:
    """Domain encoded as the leading integer of device_model_key ("0-67-0" -> 0)."""
    key = record.get("device_model_key") if isinstance(record, Mapping) else None
    if not isinstance(key, str):
        return MISSING
    match = _MODEL_KEY_PREFIX_RE.match(key.split("-")[0])
    if not match:
        return MISSING
    return int(match.group(1))


# =============================================================================
# Converters and acceptance tests
# =============================================================================

def to_number(value: Any) -> float:
    """Coerce an upstream reading to float; raises ValueError when it is not numeric."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("empty string")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"non-finite reading: {value!r}")
    return number


def to_text(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple)):
        raise ValueError("not a scalar")
    return str(value).strip()


def is_present(value: Any) -> bool:
    return True


def is_nonempty(value: Any) -> bool:
    return bool(value)


def is_nonzero(value: Any) -> bool:
    return value != 0


# =============================================================================
# Field Rule
# =============================================================================

@dataclass(frozen=True)
class FieldRule:
    """
    Ordered fallback chain for one normalized field.

    An accessor's value wins if it is found, converts cleanly and passes
    `accept`; otherwise the next accessor is tried, then `default`.
    """
    name: str
    accessors: Tuple[Accessor, ...]
    convert: Callable[[Any], Any] = to_number
    accept: Callable[[Any], bool] = is_present
    default: Any = 0.0

    def resolve(self, record: Mapping) -> Any:
        for accessor in self.accessors:
            value = accessor(record)
            if value is MISSING:
                continue
            try:
                converted = self.convert(value)
            except (TypeError, ValueError):
                continue
            if self.accept(converted):
                return converted
        return self.default


# =============================================================================
# Host record rules
# =============================================================================

DOMAIN = FieldRule(
    "domain",
    (path("domain"), path("device_model", "domain"), model_key_prefix),
    default=None,
)

SERIAL_NUMBER = FieldRule(
    "serial_number",
    (path("device_sn"), path("sn")),
    convert=to_text,
    accept=is_nonempty,
    default=None,
)

MODEL_NAME = FieldRule(
    "model",
    (path("device_model", "name"), path("device_model", "key")),
    convert=to_text,
    accept=is_nonempty,
    default="Drone",
)

# No default: falls back to the resolved model name
CALLSIGN = FieldRule(
    "nickname",
    (path("device_project_callsign"), path("device_organization_callsign")),
    convert=to_text,
    accept=is_nonempty,
    default=None,
)

LIVE_LATITUDE = FieldRule("latitude", (path("device_state", "latitude"),))
LIVE_LONGITUDE = FieldRule("longitude", (path("device_state", "longitude"),))
OFFLINE_LATITUDE = FieldRule("latitude", (path("device_offline_position", "latitude"),))
OFFLINE_LONGITUDE = FieldRule("longitude", (path("device_offline_position", "longitude"),))

# A zero direct reading defers to the first battery pack; a genuine zero stays zero
BATTERY_PERCENT = FieldRule(
    "battery_percent",
    (
        path("device_state", "battery", "capacity_percent"),
        path("device_state", "battery", "batteries", 0, "capacity_percent"),
    ),
    accept=is_nonzero,
)

# A zero reading on a leading alias defers to the next alias
HEIGHT = FieldRule(
    "height",
    (path("device_state", "height"), path("device_state", "elevation")),
    accept=is_nonzero,
)
SPEED = FieldRule("speed", (path("device_state", "horizontal_speed"),))
LINK_SIGNAL_QUALITY = FieldRule(
    "link_signal_quality", (path("device_state", "wireless_link", "sdr_quality"),)
)
FLIGHT_TIME = FieldRule("flight_time_seconds", (path("device_state", "total_flight_time"),))
YAW = FieldRule(
    "yaw",
    (path("device_state", "attitude_head"), path("device_state", "heading")),
    accept=is_nonzero,
)
PITCH = FieldRule("pitch", (path("device_state", "attitude_pitch"),))
ROLL = FieldRule("roll", (path("device_state", "attitude_roll"),))

# Telemetry readings resolved independently of each other
TELEMETRY_RULES: Sequence[FieldRule] = (
    BATTERY_PERCENT,
    HEIGHT,
    SPEED,
    LINK_SIGNAL_QUALITY,
    FLIGHT_TIME,
    YAW,
    PITCH,
    ROLL,
)


def resolve_position(host: Mapping) -> Tuple[float, float]:
    """
    Live position, or the last known offline position when live is exactly 0,0.

    A live 0,0 without an offline fallback is kept: it is the "no fix" sentinel.
    """
    lat = LIVE_LATITUDE.resolve(host)
    lon = LIVE_LONGITUDE.resolve(host)
    if lat == 0 and lon == 0 and isinstance(host.get("device_offline_position"), Mapping):
        lat = OFFLINE_LATITUDE.resolve(host)
        lon = OFFLINE_LONGITUDE.resolve(host)
    return lat, lon


def resolve_online(host: Mapping) -> bool:
    """Online iff the status flag is True or the numeric status code is 1."""
    status = host.get("device_online_status")
    if status is True:
        return True
    if isinstance(status, bool) or not isinstance(status, (int, float)):
        return False
    return status == 1


def resolve_nickname(host: Mapping, model_name: Optional[str] = None) -> str:
    """Project call-sign, organization call-sign, then the model display name."""
    nickname = CALLSIGN.resolve(host)
    if nickname:
        return nickname
    return model_name if model_name is not None else MODEL_NAME.resolve(host)
