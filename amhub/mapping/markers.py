"""
Drone Marker Presentation
=========================
Author: AMHUB Member
Date: 2026-10-18

Icon and popup content for a device marker. Both are pure functions of
the Device so the reconciler can compare them between frames.
"""

from dataclasses import dataclass
from html import escape
from urllib.parse import quote

from amhub.fleet.models import Device

ONLINE_COLOR = "#10b981"
OFFLINE_COLOR = "#ef4444"
ONLINE_Z_INDEX = 1000
OFFLINE_Z_INDEX = 500
ICON_SIZE = 48
LOW_BATTERY_PERCENT = 20


@dataclass(frozen=True)
class MarkerIcon:
    """Visual state of a drone marker."""
    color: str
    rotation: float
    opacity: float
    size: int = ICON_SIZE

    @property
    def svg(self) -> str:
        return drone_svg(self.color)

    def data_url(self) -> str:
        """SVG as a data URL, usable directly as an image source."""
        return "data:image/svg+xml;charset=utf-8," + quote(self.svg)


@dataclass(frozen=True)
class IconSignature:
    """Everything that decides whether a marker must be restyled."""
    online: bool
    yaw: float
    z_index: int


def drone_svg(color: str) -> str:
    """Quadcopter glyph pointing north; rotation is applied by the surface."""
    glow = "glow-" + color.lstrip("#")
    rotors = "".join(
        f'<path d="M{x1} {y1} L{x2} {y2}" stroke="{color}" stroke-width="4" stroke-linecap="round" />'
        f'<circle cx="{x2}" cy="{y2}" r="8" stroke="{color}" stroke-width="2" fill="none" />'
        for x1, y1, x2, y2 in ((40, 40, 25, 25), (60, 40, 75, 25), (40, 60, 25, 75), (60, 60, 75, 75))
    )
    return (
        '<svg viewBox="0 0 100 100" xmlns="http://www.w3.org/2000/svg">'
        f'<defs><filter id="{glow}" x="-50%" y="-50%" width="200%" height="200%">'
        '<feGaussianBlur stdDeviation="2" result="coloredBlur"/>'
        '<feMerge><feMergeNode in="coloredBlur"/><feMergeNode in="SourceGraphic"/></feMerge>'
        '</filter></defs>'
        f'<g filter="url(#{glow})">'
        f'<path d="M40 40 h20 v20 h-20 z" fill="{color}" />'
        f'{rotors}'
        f'<path d="M45 35 L55 35 L50 25 Z" fill="{color}" />'
        '</g></svg>'
    )


def icon_signature(device: Device) -> IconSignature:
    yaw = device.telemetry.yaw if device.telemetry is not None else 0.0
    return IconSignature(
        online=device.is_online,
        yaw=yaw,
        z_index=ONLINE_Z_INDEX if device.is_online else OFFLINE_Z_INDEX,
    )


def drone_icon(signature: IconSignature) -> MarkerIcon:
    """Two visually distinct states keyed by online-ness, rotated by yaw."""
    if signature.online:
        return MarkerIcon(color=ONLINE_COLOR, rotation=signature.yaw, opacity=1.0)
    return MarkerIcon(color=OFFLINE_COLOR, rotation=signature.yaw, opacity=0.7)


def format_flight_time(seconds: float) -> str:
    """
    Format flight time as minutes and seconds.

    Example:
        >>> format_flight_time(125)
        '2m 5s'
    """
    total = int(seconds)
    return f"{total // 60}m {total % 60}s"


def render_popup(device: Device) -> str:
    """HTML detail overlay for a device with telemetry."""
    t = device.telemetry
    if t is None:
        return f"<div class='amhub-popup'><b>{escape(device.nickname)}</b><br/>NO SIGNAL</div>"

    if device.is_online:
        badge = "<span style='color:#10b981;font-weight:800;'>LINK ESTABLISHED</span>"
    else:
        badge = "<span style='color:#ef4444;font-weight:800;'>CONNECTION LOST</span>"

    battery_style = "color:#dc2626;font-weight:900;" if t.battery_percent < LOW_BATTERY_PERCENT else "font-weight:700;"

    return (
        "<div class='amhub-popup' style='min-width:220px;font-family:sans-serif;'>"
        f"<div style='font-weight:900;text-transform:uppercase;'>{escape(device.nickname)}</div>"
        f"<div style='font-size:9px;color:#64748b;font-family:monospace;'>{escape(device.model)}</div>"
        f"{badge}"
        "<table style='width:100%;font-size:10px;margin-top:6px;'>"
        f"<tr><td>Live Latitude</td><td style='font-family:monospace;'>{t.latitude:.7f}</td></tr>"
        f"<tr><td>Live Longitude</td><td style='font-family:monospace;'>{t.longitude:.7f}</td></tr>"
        f"<tr><td>Speed</td><td>{t.speed:.1f} m/s</td></tr>"
        f"<tr><td>AGL Height</td><td>{t.height:.1f} m</td></tr>"
        f"<tr><td>Battery</td><td style='{battery_style}'>{t.battery_percent:g}%</td></tr>"
        f"<tr><td>Flight Time</td><td>{format_flight_time(t.flight_time_seconds)}</td></tr>"
        "</table>"
        "<div style='font-size:8px;color:#94a3b8;font-family:monospace;'>"
        f"SIG: {t.link_signal_quality:g}% | SN: {escape(device.serial_number)}"
        "</div></div>"
    )
