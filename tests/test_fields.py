"""Unit tests for the ordered field fallback rules."""

import pytest

from amhub.fleet.fields import (
    BATTERY_PERCENT,
    DOMAIN,
    HEIGHT,
    MISSING,
    MODEL_NAME,
    SERIAL_NUMBER,
    YAW,
    model_key_prefix,
    path,
    resolve_nickname,
    resolve_online,
    resolve_position,
    to_number,
)


def test_path_walks_mappings_and_lists() -> None:
    record = {"a": {"b": [{"c": 7}]}}
    assert path("a", "b", 0, "c")(record) == 7
    assert path("a", "b", 3, "c")(record) is MISSING
    assert path("a", "x")(record) is MISSING
    assert path("a", "b", "c")(record) is MISSING


def test_path_treats_none_as_missing() -> None:
    assert path("a")({"a": None}) is MISSING


def test_to_number_rejects_blank_and_non_finite() -> None:
    assert to_number("12.5") == 12.5
    assert to_number(True) == 1.0
    for bad in ("", "  ", "abc", float("nan"), float("inf")):
        with pytest.raises(ValueError):
            to_number(bad)


def test_battery_direct_reading_wins() -> None:
    host = {"device_state": {"battery": {"capacity_percent": 64, "batteries": [{"capacity_percent": 80}]}}}
    assert BATTERY_PERCENT.resolve(host) == 64


def test_battery_zero_direct_reading_falls_through_to_first_pack() -> None:
    host = {"device_state": {"battery": {"capacity_percent": 0, "batteries": [{"capacity_percent": 80}]}}}
    assert BATTERY_PERCENT.resolve(host) == 80


def test_battery_absent_everywhere_defaults_to_zero() -> None:
    assert BATTERY_PERCENT.resolve({"device_state": {}}) == 0.0
    assert BATTERY_PERCENT.resolve({"device_state": {"battery": {"batteries": []}}}) == 0.0


def test_height_falls_back_to_elevation() -> None:
    assert HEIGHT.resolve({"device_state": {"elevation": 87.5}}) == 87.5
    assert HEIGHT.resolve({"device_state": {"height": 12, "elevation": 87.5}}) == 12


def test_zero_height_defers_to_elevation() -> None:
    assert HEIGHT.resolve({"device_state": {"height": 0, "elevation": 87.5}}) == 87.5
    assert HEIGHT.resolve({"device_state": {"height": 0, "elevation": 0}}) == 0.0
    assert HEIGHT.resolve({"device_state": {"height": 0}}) == 0.0


def test_height_skips_non_numeric_reading() -> None:
    assert HEIGHT.resolve({"device_state": {"height": "n/a", "elevation": 40}}) == 40


def test_yaw_falls_back_to_heading() -> None:
    assert YAW.resolve({"device_state": {"heading": 270}}) == 270
    assert YAW.resolve({"device_state": {"attitude_head": -15, "heading": 270}}) == -15


def test_zero_attitude_head_defers_to_heading() -> None:
    assert YAW.resolve({"device_state": {"attitude_head": 0, "heading": 90}}) == 90
    assert YAW.resolve({"device_state": {"attitude_head": 0}}) == 0.0


def test_domain_sources_in_order() -> None:
    assert DOMAIN.resolve({"domain": 2, "device_model": {"domain": 0}}) == 2
    assert DOMAIN.resolve({"device_model": {"domain": "0"}}) == 0
    assert DOMAIN.resolve({"device_model_key": "0-67-0"}) == 0
    assert DOMAIN.resolve({"device_model_key": "3-1-0"}) == 3
    assert DOMAIN.resolve({}) is None


def test_model_key_prefix_requires_leading_integer() -> None:
    assert model_key_prefix({"device_model_key": "x-1"}) is MISSING
    assert model_key_prefix({"device_model_key": 5}) is MISSING


def test_serial_number_prefers_device_sn_and_skips_blank() -> None:
    assert SERIAL_NUMBER.resolve({"device_sn": "A1", "sn": "B2"}) == "A1"
    assert SERIAL_NUMBER.resolve({"device_sn": "", "sn": "B2"}) == "B2"
    assert SERIAL_NUMBER.resolve({}) is None


def test_model_name_defaults_to_drone() -> None:
    assert MODEL_NAME.resolve({"device_model": {"key": "M3D"}}) == "M3D"
    assert MODEL_NAME.resolve({}) == "Drone"


def test_nickname_fallback_chain() -> None:
    base = {"device_model": {"name": "Mavic 3"}}
    assert resolve_nickname({**base, "device_project_callsign": "Falcon"}) == "Falcon"
    assert resolve_nickname({**base, "device_organization_callsign": "Org-7"}) == "Org-7"
    assert resolve_nickname({**base, "device_project_callsign": ""}) == "Mavic 3"


def test_online_accepts_true_or_one_only() -> None:
    assert resolve_online({"device_online_status": True})
    assert resolve_online({"device_online_status": 1})
    assert not resolve_online({"device_online_status": 0})
    assert not resolve_online({"device_online_status": "1"})
    assert not resolve_online({"device_online_status": False})
    assert not resolve_online({})


def test_position_uses_offline_position_only_at_exact_zero() -> None:
    offline = {"latitude": 24.1, "longitude": 54.2}
    assert resolve_position({"device_state": {"latitude": 0, "longitude": 0}, "device_offline_position": offline}) == (24.1, 54.2)
    assert resolve_position({"device_state": {"latitude": 0.1, "longitude": 0}, "device_offline_position": offline}) == (0.1, 0)
    assert resolve_position({"device_state": {}, "device_offline_position": offline}) == (24.1, 54.2)
    assert resolve_position({"device_state": {}}) == (0, 0)
