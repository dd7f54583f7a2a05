"""
AMHUB Console Styles - Tactical Dark Theme
==========================================
Author: AMHUB Member
Date: 2026-10-18

Dark CSS and HTML fragments for the Streamlit fleet console.
"""

import html

# Tactical color palette
COLORS = {
    "primary": "#10B981",
    "primary_light": "#34D399",
    "secondary": "#38BDF8",
    "success": "#10B981",
    "warning": "#F59E0B",
    "danger": "#EF4444",
    "bg_main": "#020617",
    "bg_card": "#0F172A",
    "text_primary": "#E2E8F0",
    "text_secondary": "#64748B",
    "border": "#1E293B",
}

# Console CSS
CUSTOM_CSS = """
<style>
/* Monospace tactical font */
@import url('https://fonts.googleapis.com/css2?family=JetBrains+Mono:wght@400;600;700&display=swap');

* {
    font-family: 'JetBrains Mono', ui-monospace, monospace !important;
}

.stApp {
    background: #020617;
    color: #E2E8F0;
}

/* Hide Streamlit branding */
#MainMenu, footer {visibility: hidden;}
.stDeployButton {display: none;}

.block-container {
    padding: 1rem 1.5rem 1.5rem 1.5rem !important;
    max-width: 100%;
}

section[data-testid="stSidebar"] {
    background: #0F172A;
    border-right: 1px solid #1E293B;
}

/* Button styling */
.stButton > button {
    background: #064E3B;
    color: #D1FAE5;
    border: 1px solid #10B981;
    border-radius: 6px;
    font-weight: 600;
    font-size: 12px;
    text-transform: uppercase;
    letter-spacing: 0.05em;
}

.stButton > button:hover {
    background: #10B981;
    color: #020617;
}

.stButton > button[kind="primary"] {
    background: #7F1D1D;
    color: #FEE2E2;
    border: 1px solid #EF4444;
}

.stButton > button[kind="primary"]:hover {
    background: #EF4444;
    color: #020617;
}

.stDataFrame {
    border: 1px solid #1E293B;
    border-radius: 6px;
}

/* Event log */
.log-container {
    background: #020617;
    border: 1px solid #1E293B;
    border-radius: 6px;
    padding: 8px 12px;
    max-height: 220px;
    overflow-y: auto;
    font-size: 11px;
}

.log-info { color: #94A3B8; }
.log-request { color: #38BDF8; }
.log-success { color: #10B981; }
.log-error { color: #EF4444; }

::-webkit-scrollbar {
    width: 6px;
    height: 6px;
}

::-webkit-scrollbar-thumb {
    background: #1E293B;
    border-radius: 3px;
}

@keyframes pulse {
    0%, 100% { opacity: 1; }
    50% { opacity: 0.4; }
}

.animate-pulse {
    animation: pulse 1.5s ease-in-out infinite;
}
</style>
"""


def get_panel_html(title: str, icon: str, content: str) -> str:
    return f"""
    <div style="
        background: #0F172A;
        border-radius: 8px;
        padding: 14px;
        border: 1px solid #1E293B;
    ">
        <div style="
            font-size: 11px;
            font-weight: 700;
            color: #64748B;
            text-transform: uppercase;
            letter-spacing: 0.12em;
            margin-bottom: 10px;
        ">{icon} {title}</div>
        {content}
    </div>
    """


def get_log_html(entries: list) -> str:
    """Event log rows ({level, message, time}) newest last."""
    log_lines = []
    for entry in entries:
        level = entry.get("level", "info")
        msg = html.escape(str(entry.get("message", "")))
        time = entry.get("time", "")
        log_lines.append(f'<div class="log-{level}">[{time}] {msg}</div>')
    return f'<div class="log-container">{"".join(log_lines)}</div>'


def _badge(label: str, bg: str, fg: str, pulse: bool = False) -> str:
    css_class = ' class="animate-pulse"' if pulse else ""
    return (
        f'<span{css_class} style="background:{bg};color:{fg};padding:4px 12px;'
        f'border-radius:4px;font-size:11px;font-weight:700;letter-spacing:0.1em;">{label}</span>'
    )


def get_status_badge(status: str) -> str:
    """Alert transmission badge: idle / sending / success / error."""
    colors = {
        "idle": ("#1E293B", "#94A3B8"),
        "sending": ("#0C4A6E", "#BAE6FD"),
        "success": ("#064E3B", "#6EE7B7"),
        "error": ("#7F1D1D", "#FECACA"),
    }
    labels = {
        "idle": "READY",
        "sending": "TRANSMITTING",
        "success": "SENT",
        "error": "FAILED",
    }
    bg, fg = colors.get(status, colors["idle"])
    return _badge(labels.get(status, status.upper()), bg, fg, pulse=status == "sending")


def get_link_badge(status: str) -> str:
    """Link indicator: healthy (emerald), unauthorized (amber), unhealthy (red)."""
    styles = {
        "healthy": ("LIVE LINK", "#064E3B", "#6EE7B7"),
        "unauthorized": ("UNAUTHORIZED", "#78350F", "#FCD34D"),
        "unhealthy": ("OFFLINE", "#7F1D1D", "#FECACA"),
    }
    label, bg, fg = styles.get(status, styles["unhealthy"])
    return _badge(label, bg, fg, pulse=status == "healthy")
