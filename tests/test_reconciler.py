"""Unit tests for incremental marker reconciliation."""

from amhub.fleet import normalize
from amhub.mapping import MarkerReconciler, OperationKind
from amhub.mapping.markers import OFFLINE_COLOR, OFFLINE_Z_INDEX, ONLINE_Z_INDEX

from fakes import make_host, topology_body


def _snapshot(*hosts):
    return normalize(topology_body(*hosts))


def _kinds(ops):
    return [(op.kind, op.serial_number) for op in ops]


def test_first_frame_creates_one_marker_per_renderable_device(surface) -> None:
    reconciler = MarkerReconciler(surface)
    snapshot = _snapshot(
        make_host("A"),
        make_host("B", online=False),
        make_host("NOFIX", lat=0, lon=0),
    )
    ops, states = reconciler.reconcile({}, snapshot)

    assert _kinds(ops) == [(OperationKind.CREATE, "A"), (OperationKind.CREATE, "B")]
    assert set(states) == {"A", "B"}
    assert surface.markers[states["A"].handle]["z_index"] == ONLINE_Z_INDEX
    assert surface.markers[states["B"].handle]["z_index"] == OFFLINE_Z_INDEX
    assert surface.markers[states["A"].handle]["popup"] is not None


def test_reconcile_is_idempotent(surface) -> None:
    reconciler = MarkerReconciler(surface)
    snapshot = _snapshot(make_host("A"), make_host("B"))
    _, states = reconciler.reconcile({}, snapshot)
    calls_before = len(surface.calls)

    ops, again = reconciler.reconcile(states, snapshot)

    assert ops == []
    assert again == states
    assert len(surface.calls) == calls_before


def test_set_difference_keyed_by_serial(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A"), make_host("B"), make_host("C")))
    handle_b, handle_c = states["B"].handle, states["C"].handle

    # Order changes must not matter
    ops, states = reconciler.reconcile(states, _snapshot(make_host("D"), make_host("C"), make_host("B")))

    assert sorted(_kinds(ops), key=lambda k: k[1]) == [
        (OperationKind.REMOVE, "A"),
        (OperationKind.CREATE, "D"),
    ]
    assert states["B"].handle == handle_b
    assert states["C"].handle == handle_c
    assert set(surface.markers) == {handle_b, handle_c, states["D"].handle}


def test_movement_updates_position_only(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A", lat=25.0, lon=55.0)))
    handle = states["A"].handle

    ops, states = reconciler.reconcile(states, _snapshot(make_host("A", lat=25.001, lon=55.0)))

    kinds = [op.kind for op in ops]
    assert OperationKind.MOVE in kinds
    assert OperationKind.CREATE not in kinds
    assert OperationKind.RESTYLE not in kinds
    assert surface.markers[handle]["position"] == (25.001, 55.0)


def test_going_offline_restyles_in_place(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A")))
    handle = states["A"].handle

    ops, states = reconciler.reconcile(states, _snapshot(make_host("A", online=False)))

    assert OperationKind.RESTYLE in [op.kind for op in ops]
    assert states["A"].handle == handle
    assert surface.markers[handle]["z_index"] == OFFLINE_Z_INDEX
    assert surface.markers[handle]["icon"].color == OFFLINE_COLOR


def test_yaw_change_rotates_icon(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A", attitude_head=0)))
    ops, states = reconciler.reconcile(states, _snapshot(make_host("A", attitude_head=45)))

    assert (OperationKind.RESTYLE, "A") in _kinds(ops)
    assert surface.markers[states["A"].handle]["icon"].rotation == 45


def test_open_popup_is_refreshed_in_place(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A", horizontal_speed=1)))
    _, states = reconciler.open_popup(states, "A")
    handle = states["A"].handle
    surface.calls.clear()

    ops, states = reconciler.reconcile(states, _snapshot(make_host("A", horizontal_speed=9)))

    assert _kinds(ops) == [(OperationKind.REFRESH_POPUP, "A")]
    assert surface.names() == ["update_popup"]
    assert handle in surface.open
    assert "9.0 m/s" in surface.markers[handle]["popup"]
    assert states["A"].popup_open


def test_closed_popup_content_is_rebound(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A", horizontal_speed=1)))
    ops, _ = reconciler.reconcile(states, _snapshot(make_host("A", horizontal_speed=2)))
    assert _kinds(ops) == [(OperationKind.REBIND_POPUP, "A")]


def test_removal_closes_open_popup_first(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A")))
    _, states = reconciler.open_popup(states, "A")
    surface.calls.clear()

    ops, states = reconciler.reconcile(states, _snapshot())

    assert _kinds(ops) == [(OperationKind.CLOSE_POPUP, "A"), (OperationKind.REMOVE, "A")]
    assert surface.names() == ["close_popup", "remove_marker"]
    assert states == {}
    assert surface.markers == {}


def test_losing_fix_removes_marker(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A")))
    ops, states = reconciler.reconcile(states, _snapshot(make_host("A", lat=0, lon=0, online=False)))
    assert _kinds(ops) == [(OperationKind.REMOVE, "A")]
    assert "A" not in states


def test_duplicate_serial_renders_one_marker_at_last_position(surface) -> None:
    reconciler = MarkerReconciler(surface)
    ops, states = reconciler.reconcile({}, _snapshot(make_host("A", lat=1, lon=1), make_host("A", lat=2, lon=2)))
    assert [op.kind for op in ops].count(OperationKind.CREATE) == 1
    assert surface.markers[states["A"].handle]["position"] == (2, 2)


def test_popup_actions_on_unknown_serial_are_noops(surface) -> None:
    reconciler = MarkerReconciler(surface)
    ops, states = reconciler.open_popup({}, "missing")
    assert ops == [] and states == {}
    ops, states = reconciler.close_popup({}, "missing")
    assert ops == [] and states == {}
    assert surface.calls == []


def test_previous_states_are_not_mutated(surface) -> None:
    reconciler = MarkerReconciler(surface)
    _, states = reconciler.reconcile({}, _snapshot(make_host("A")))
    frozen = dict(states)
    reconciler.reconcile(states, _snapshot(make_host("B")))
    assert states == frozen
