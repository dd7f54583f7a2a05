"""
UI Module for AMHUB
===================
Author: AMHUB Member
Date: 2026-10-18

Dark tactical styles for the Streamlit fleet console.
"""

from .styles import CUSTOM_CSS, COLORS, get_panel_html, get_log_html, get_status_badge, get_link_badge

__all__ = [
    "CUSTOM_CSS",
    "COLORS",
    "get_panel_html",
    "get_log_html",
    "get_status_badge",
    "get_link_badge",
]
