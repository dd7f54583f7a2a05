"""
AMHUB Command Console
=====================
Author: AMHUB Member
Date: 2026-10-18

Operator console for a drone fleet:
- Topology polling from the fleet-management API
- Telemetry normalization into a stable device model
- Incremental marker reconciliation on a live map
- One-shot alert workflow trigger
"""

from pathlib import Path

PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent
