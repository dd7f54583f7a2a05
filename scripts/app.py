"""
AMHUB Fleet Console
====================================
Live drone map, mission targeting and workflow alerts
"""

import sys
from pathlib import Path

import streamlit as st

# Setup paths
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from amhub.console import AlertStatus, ConsoleRuntime, FleetConsole
from amhub.console.alerts import THREAT_LEVELS
from amhub.core import ConfigError, get_config, setup_logging
from amhub.mapping.surface import BASEMAPS, MARKER_LAYER_ID
from amhub.ui import CUSTOM_CSS, get_link_badge, get_log_html, get_panel_html, get_status_badge

# Page config
st.set_page_config(
    page_title="AMHUB Fleet Console",
    page_icon="🛰️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown(CUSTOM_CSS, unsafe_allow_html=True)

# =============================================================================
# Session State
# =============================================================================


@st.cache_resource
def get_runtime() -> ConsoleRuntime:
    """One event loop thread shared by every browser session."""
    runtime = ConsoleRuntime()
    runtime.start()
    return runtime


def init_session():
    """One console per browser session; its poller stops when the session is dropped."""
    if "console" in st.session_state:
        return
    config = get_config()
    setup_logging(config.log_level)

    console = FleetConsole(config)
    get_runtime().host(console)

    st.session_state.console = console
    st.session_state.event_count = 20


init_session()
console: FleetConsole = st.session_state.console
runtime: ConsoleRuntime = get_runtime()

# =============================================================================
# Sidebar: Settings
# =============================================================================

with st.sidebar:
    st.title("🛰️ AMHUB")
    st.markdown("Fleet Console")
    st.markdown("---")

    st.markdown("**Upstream Settings**")
    with st.form("settings"):
        cfg = console.config
        api_url = st.text_input("API URL", value=cfg.api_url)
        user_token = st.text_input("User Token", value=cfg.user_token, type="password")
        project_uuid = st.text_input("Project UUID", value=cfg.project_uuid)
        workflow_uuid = st.text_input("Workflow UUID", value=cfg.workflow_uuid)
        creator_id = st.text_input("Creator ID", value=cfg.creator_id)
        proxy_base = st.text_input("CORS Proxy", value=cfg.proxy_base, help="Leave empty to call the API directly.")
        interval = st.number_input("Poll Interval (ms)", min_value=200, value=cfg.poll_interval_ms, step=100)
        applied = st.form_submit_button("Apply")

    if applied:
        try:
            new_config = cfg.with_overrides(
                api_url=api_url,
                user_token=user_token,
                project_uuid=project_uuid,
                workflow_uuid=workflow_uuid,
                creator_id=creator_id,
                proxy_base=proxy_base,
                poll_interval_ms=int(interval),
            )
        except ConfigError as e:
            st.error(f"Invalid settings: {e}")
        else:
            restart = new_config.poll_interval_ms != cfg.poll_interval_ms
            console.apply_settings(new_config)
            if restart:
                runtime.call(console.stop_polling)
                runtime.call(console.start_polling)
            st.success("Settings applied")

    st.markdown("---")
    basemap = st.radio("Basemap", list(BASEMAPS), horizontal=True, format_func=str.title)
    console.set_basemap(basemap)

    if st.button("⟳ Refresh Now", use_container_width=True):
        runtime.call(console.refresh)

# =============================================================================
# Live Panels
# =============================================================================


@st.fragment(run_every=1)
def live_view():
    ops = console.sync_map()

    header_cols = st.columns([3, 1])
    with header_cols[0]:
        st.markdown(
            f"{get_link_badge(console.health.status.value)} "
            f"<span style='color:#64748B;font-size:11px;margin-left:8px'>"
            f"{console.snapshot.message} · {len(console.snapshot)} drone(s)"
            f"{' · syncing…' if console.loading else ''}</span>",
            unsafe_allow_html=True,
        )
    with header_cols[1]:
        if ops:
            st.caption(f"{len(ops)} map update(s)")

    map_col, list_col = st.columns([3, 1])

    with map_col:
        event = st.pydeck_chart(
            console.surface.to_deck(),
            use_container_width=True,
            on_select="rerun",
            selection_mode="single-object",
            key="fleet_map",
        )
        picked = (event.selection.get("objects") or {}).get(MARKER_LAYER_ID) if event else None
        if picked:
            serial = console.serial_for_handle(picked[0]["handle"])
            if serial and serial != console.selection.selected_serial:
                console.select_device(serial)
                console.open_popup(serial)

        for content in console.surface.open_popup_contents():
            st.markdown(get_panel_html("Telemetry", "📡", content), unsafe_allow_html=True)

    with list_col:
        st.markdown("**Drones**")
        if not len(console.snapshot):
            st.caption(console.snapshot.message)
        for device in console.snapshot:
            dot = "🟢" if device.is_online else "🔴"
            if st.button(f"{dot} {device.nickname}", key=f"select-{device.serial_number}", use_container_width=True):
                console.select_device(device.serial_number)

    with st.expander("Device Table"):
        st.dataframe(console.device_table(), use_container_width=True, hide_index=True)


live_view()

# =============================================================================
# Mission Panel
# =============================================================================

mission_col, alert_col = st.columns(2)

with mission_col:
    st.markdown("### Mission")
    device = console.selection.selected_device
    if console.selection.selected_serial is None:
        st.caption("No drone selected")
    elif device is None:
        st.warning("Selected drone has no telemetry")
    else:
        st.markdown(f"**{device.nickname}** · {device.model} · `{device.serial_number}`")
        if st.button("Sync Target to Drone", use_container_width=True):
            console.copy_to_target()
    if console.selection.selected_serial is not None and st.button("Deselect"):
        console.deselect()

    target = console.selection.target
    st.markdown("**Target Origin**")
    coord_cols = st.columns(2)
    lat = coord_cols[0].number_input("Latitude", value=target.latitude, format="%.6f", min_value=-90.0, max_value=90.0)
    lon = coord_cols[1].number_input("Longitude", value=target.longitude, format="%.6f", min_value=-180.0, max_value=180.0)
    if (lat, lon) != target.position:
        console.set_target(lat, lon)

    query = st.text_input("Search place")
    if st.button("Search") and query:
        if not console.search_target(query):
            st.error(f"No location found for '{query}'")

with alert_col:
    st.markdown("### Alert")
    st.markdown(get_status_badge(console.alerts.status.value), unsafe_allow_html=True)
    with st.form("alert"):
        requester = st.text_input("Requester / Mission ID", placeholder="Alert-YYYYMMDDHHMMSS")
        level = st.select_slider("Threat Level", options=list(THREAT_LEVELS), value=console.config.default_level)
        description = st.text_area("Description", value=console.config.default_description)
        sending = console.alerts.status is AlertStatus.SENDING
        fire = st.form_submit_button("🚨 Trigger Alert", type="primary", disabled=sending)
    if fire:
        if console.trigger_alert(requester, level, description) is None:
            st.error("Transmission failed")
        else:
            st.success("Alert transmitted")

# =============================================================================
# Event Log
# =============================================================================

st.markdown("### Event Log")
rows = [entry.to_row() for entry in console.event_log.tail(st.session_state.event_count)]
st.markdown(get_log_html(rows), unsafe_allow_html=True)

# Footer
st.markdown("---")
st.markdown("<center style='color:#64748B; font-size:12px'>AMHUB Fleet Console</center>", unsafe_allow_html=True)
