"""
Telemetry Normalizer
====================
Author: AMHUB Member
Date: 2026-10-18

Converts one raw topology response into an immutable DeviceSnapshot.

Shape handled (data.list -> item.host):
    {"code": 0, "data": {"list": [{"host": {...}}, ...]}}

Only aerial vehicles (domain 0) survive; docks, gateways and other nodes
are dropped on purpose. Entries that cannot be keyed are dropped silently.
The result is a pure function of the input body.
"""

import logging
from typing import Any, List, Mapping

from .errors import StructureError, ValidationSkip
from .fields import (
    DOMAIN,
    MODEL_NAME,
    SERIAL_NUMBER,
    TELEMETRY_RULES,
    resolve_nickname,
    resolve_online,
    resolve_position,
)
from .models import (
    NO_DRONES_MESSAGE,
    SUCCESS_MESSAGE,
    Device,
    DeviceSnapshot,
    DeviceTelemetry,
)

logger = logging.getLogger("AMHUB.Normalizer")

AERIAL_DOMAIN_CODE = 0


def extract_host_list(raw_body: Any) -> List[Any]:
    """Validate the top-level shape and return the entry list."""
    if not isinstance(raw_body, Mapping):
        raise StructureError(f"Invalid topology response structure: body is {type(raw_body).__name__}")
    data = raw_body.get("data")
    if not isinstance(data, Mapping):
        raise StructureError("Invalid topology response structure: missing 'data' object")
    entries = data.get("list")
    if not isinstance(entries, list):
        raise StructureError("Invalid topology response structure: 'data.list' is not a list")
    return entries


def normalize_host(host: Mapping) -> Device:
    """
    Build one Device from a host record.

    Raises:
        ValidationSkip: non-aerial domain or no serial number
    """
    domain = DOMAIN.resolve(host)
    if domain != AERIAL_DOMAIN_CODE:
        raise ValidationSkip(f"domain {domain!r} is not an aerial vehicle")

    serial = SERIAL_NUMBER.resolve(host)
    if not serial:
        raise ValidationSkip("no serial number")

    is_online = resolve_online(host)
    model = MODEL_NAME.resolve(host)
    nickname = resolve_nickname(host, model)

    latitude, longitude = resolve_position(host)

    telemetry = None
    if latitude != 0 or longitude != 0 or is_online:
        readings = {rule.name: rule.resolve(host) for rule in TELEMETRY_RULES}
        telemetry = DeviceTelemetry(latitude=latitude, longitude=longitude, **readings)

    return Device(
        serial_number=serial,
        nickname=nickname,
        model=model,
        is_online=is_online,
        telemetry=telemetry,
        raw=dict(host),
    )


def normalize(raw_body: Any) -> DeviceSnapshot:
    """
    Normalize a topology response body into a DeviceSnapshot.

    Args:
        raw_body: Parsed JSON body of the topology endpoint

    Returns:
        DeviceSnapshot in upstream order (duplicates are kept)

    Raises:
        StructureError: If the top-level shape is not data.list
    """
    entries = extract_host_list(raw_body)

    devices: List[Device] = []
    skipped = 0
    for index, item in enumerate(entries):
        host = item.get("host") if isinstance(item, Mapping) else None
        if not isinstance(host, Mapping):
            # Non-device nodes carry no host record
            continue
        try:
            devices.append(normalize_host(host))
        except ValidationSkip as e:
            skipped += 1
            logger.debug(f"Skipping topology entry #{index}: {e}")

    if skipped:
        logger.debug(f"Normalized {len(devices)} drone(s), skipped {skipped} entr{'y' if skipped == 1 else 'ies'}")

    code = raw_body.get("code") or 0
    try:
        code = int(code)
    except (TypeError, ValueError):
        code = 0

    return DeviceSnapshot(
        devices=tuple(devices),
        message=NO_DRONES_MESSAGE if not devices else SUCCESS_MESSAGE,
        code=code,
    )
