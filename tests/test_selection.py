"""Unit tests for device selection and target synchronization."""

from amhub.console import EventLog, SelectionController, TargetCoordinate
from amhub.fleet import EMPTY_SNAPSHOT, normalize

from fakes import make_host, topology_body


class _Feed:
    """Mutable stand-in for the poller's latest snapshot."""

    def __init__(self, snapshot=EMPTY_SNAPSHOT):
        self.snapshot = snapshot

    def __call__(self):
        return self.snapshot


def _controller(feed, recenters=None, event_log=None):
    return SelectionController(
        snapshot_source=feed,
        target=TargetCoordinate(25.0, 55.0),
        on_recenter=recenters.append if recenters is not None else None,
        event_log=event_log,
    )


def test_select_recenters_once_on_device_with_fix() -> None:
    feed = _Feed(normalize(topology_body(make_host("A", lat=25.1, lon=55.1, callsign="Alpha"))))
    recenters = []
    log = EventLog()
    controller = _controller(feed, recenters, log)

    device = controller.select_device("A")

    assert device.serial_number == "A"
    assert recenters == [(25.1, 55.1)]
    assert log.entries[-1].message == "Uplink established with drone: Alpha"

    # Later telemetry must not pull the view again
    feed.snapshot = normalize(topology_body(make_host("A", lat=25.2, lon=55.2)))
    assert controller.selected_device.telemetry.position == (25.2, 55.2)
    assert recenters == [(25.1, 55.1)]


def test_select_device_without_fix_does_not_recenter() -> None:
    feed = _Feed(normalize(topology_body(make_host("A", lat=0, lon=0, online=True))))
    recenters = []
    controller = _controller(feed, recenters)
    assert controller.select_device("A") is not None
    assert recenters == []


def test_stale_selection_resolves_to_none() -> None:
    feed = _Feed(normalize(topology_body(make_host("A"))))
    controller = _controller(feed)
    controller.select_device("A")

    feed.snapshot = normalize(topology_body(make_host("B")))

    assert controller.selected_serial == "A"
    assert controller.selected_device is None
    assert controller.copy_to_target() is False
    assert controller.target == TargetCoordinate(25.0, 55.0)


def test_copy_to_target_rounds_to_six_decimals() -> None:
    feed = _Feed(normalize(topology_body(make_host("A", lat=25.123456789, lon=55.987654321, callsign="Alpha"))))
    log = EventLog()
    controller = _controller(feed, event_log=log)
    controller.select_device("A")

    assert controller.copy_to_target() is True
    assert controller.target == TargetCoordinate(25.123457, 55.987654)
    assert log.entries[-1].message == "Coordinates synchronized to drone: Alpha"


def test_copy_to_target_without_telemetry_is_noop() -> None:
    feed = _Feed(normalize(topology_body(make_host("A", lat=0, lon=0, online=False))))
    controller = _controller(feed)
    controller.select_device("A")
    assert controller.copy_to_target() is False
    assert controller.target == TargetCoordinate(25.0, 55.0)


def test_copy_to_target_with_no_selection() -> None:
    assert _controller(_Feed()).copy_to_target() is False


def test_deselect() -> None:
    feed = _Feed(normalize(topology_body(make_host("A"))))
    controller = _controller(feed)
    controller.select_device("A")
    controller.deselect()
    assert controller.selected_serial is None
    assert controller.selected_device is None


def test_set_target_manual_and_map_click() -> None:
    controller = _controller(_Feed())
    assert controller.set_target(1.123456789, 2.5) == TargetCoordinate(1.123456789, 2.5)
    assert controller.set_target(1.123456789, 2.987654321, rounded=True) == TargetCoordinate(1.123457, 2.987654)
