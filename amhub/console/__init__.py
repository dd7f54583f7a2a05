"""
Console Module for AMHUB
========================
Author: AMHUB Member
Date: 2026-10-18

Operator-facing state: selection and target sync, alert workflow, event
log and the runtime that hosts the poller for synchronous front ends.
"""

from .event_log import EventLog, LogEntry, LogType
from .selection import SelectionController, TargetCoordinate, round_coordinate
from .alerts import AlertStatus, AlertWorkflow, alert_name, build_workflow_request
from .fleet_console import FleetConsole, snapshot_to_frame
from .runtime import ConsoleRuntime

__all__ = [
    # Event log
    "EventLog",
    "LogEntry",
    "LogType",
    # Selection
    "SelectionController",
    "TargetCoordinate",
    "round_coordinate",
    # Alerts
    "AlertStatus",
    "AlertWorkflow",
    "alert_name",
    "build_workflow_request",
    # Console
    "FleetConsole",
    "snapshot_to_frame",
    "ConsoleRuntime",
]
