"""Unit tests for the pydeck-backed map surface and marker presentation."""

import pydeck as pdk
import pytest

from amhub.fleet import Device, DeviceTelemetry
from amhub.mapping import DeckMapSurface, drone_icon, haversine_m, icon_signature, render_popup
from amhub.mapping.markers import ICON_SIZE, OFFLINE_COLOR, ONLINE_COLOR, format_flight_time
from amhub.mapping.surface import FOLLOW_ZOOM, MARKER_LAYER_ID, TARGET_LAYER_ID


def _device(online=True, battery=80.0, yaw=30.0):
    return Device(
        serial_number="SN<1>",
        nickname="Alpha & Co",
        model="Matrice 30T",
        is_online=online,
        telemetry=DeviceTelemetry(
            latitude=25.1234567891,
            longitude=55.5,
            height=42.0,
            speed=3.25,
            battery_percent=battery,
            link_signal_quality=90,
            flight_time_seconds=125,
            yaw=yaw,
        ),
    )


def test_icon_states_are_distinct() -> None:
    online = drone_icon(icon_signature(_device(online=True)))
    offline = drone_icon(icon_signature(_device(online=False)))
    assert online.color == ONLINE_COLOR and online.opacity == 1.0
    assert offline.color == OFFLINE_COLOR and offline.opacity < 1.0
    assert online.rotation == 30.0
    assert online.data_url().startswith("data:image/svg+xml")


def test_popup_content() -> None:
    html = render_popup(_device())
    assert "LINK ESTABLISHED" in html
    assert "25.1234568" in html
    assert "3.2 m/s" in html or "3.3 m/s" in html
    assert "42.0 m" in html
    assert "2m 5s" in html
    assert "SIG: 90% | SN: SN&lt;1&gt;" in html
    assert "Alpha &amp; Co" in html
    assert "#dc2626" not in html


def test_popup_flags_low_battery_and_lost_link() -> None:
    html = render_popup(_device(online=False, battery=15))
    assert "CONNECTION LOST" in html
    assert "#dc2626" in html


def test_format_flight_time() -> None:
    assert format_flight_time(0) == "0m 0s"
    assert format_flight_time(3599.9) == "59m 59s"


def test_haversine() -> None:
    assert haversine_m((25.0, 55.0), (25.0, 55.0)) == 0
    assert haversine_m((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111_195, rel=1e-3)


def test_marker_lifecycle_and_popups() -> None:
    surface = DeckMapSurface(center=(25.0, 55.0))
    icon = drone_icon(icon_signature(_device()))
    handle = surface.create_marker((25.1, 55.1), icon, 1000)
    surface.bind_popup(handle, "<b>A</b>")

    assert surface.marker_count == 1
    assert not surface.is_popup_open(handle)

    surface.open_popup(handle)
    assert surface.open_popup_contents() == ["<b>A</b>"]
    surface.update_popup(handle, "<b>A2</b>")
    assert surface.open_popup_contents() == ["<b>A2</b>"]

    surface.update_marker(handle, position=(25.2, 55.2))
    assert surface.marker(handle).position == (25.2, 55.2)

    surface.remove_marker(handle)
    assert surface.marker_count == 0
    assert surface.open_popup_contents() == []
    with pytest.raises(KeyError):
        surface.update_marker(handle, position=(0, 1))


def test_marker_rows_draw_online_on_top() -> None:
    surface = DeckMapSurface(center=(25.0, 55.0))
    online = drone_icon(icon_signature(_device(online=True)))
    offline = drone_icon(icon_signature(_device(online=False)))
    first = surface.create_marker((1.0, 1.0), online, 1000)
    second = surface.create_marker((2.0, 2.0), offline, 500)

    rows = surface.marker_rows()
    assert [r["handle"] for r in rows] == [second, first]
    assert rows[1]["angle"] == -30.0
    assert rows[1]["icon_data"]["width"] == ICON_SIZE * 2


def test_target_far_jump_recenters_view() -> None:
    surface = DeckMapSurface(center=(25.0, 55.0))
    surface.set_target((25.0, 55.0))
    surface.set_target((25.001, 55.0))
    assert (surface.view.latitude, surface.view.longitude) == (25.0, 55.0)

    surface.set_target((26.0, 55.0))
    assert (surface.view.latitude, surface.view.longitude) == (26.0, 55.0)


def test_recenter_sets_view() -> None:
    surface = DeckMapSurface(center=(25.0, 55.0))
    surface.recenter((24.0, 54.0), FOLLOW_ZOOM, animated=True)
    assert surface.view.zoom == FOLLOW_ZOOM
    assert surface.view.animated


@pytest.mark.parametrize("basemap", ["streets", "satellite"])
def test_to_deck(basemap) -> None:
    surface = DeckMapSurface(center=(25.0, 55.0), basemap=basemap)
    surface.set_target((25.0, 55.0))
    surface.create_marker((25.1, 55.1), drone_icon(icon_signature(_device())), 1000)

    deck = surface.to_deck()

    assert isinstance(deck, pdk.Deck)
    assert [layer.id for layer in deck.layers] == [MARKER_LAYER_ID, TARGET_LAYER_ID]
