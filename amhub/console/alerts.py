"""
Alert Workflow Trigger
======================
Author: AMHUB Member
Date: 2026-10-18

One-shot transmission of a workflow alert at the current target. No
retry: the outcome only lands in the event log and on a status badge
that falls back to idle after a short hold.
"""

import logging
import time
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from amhub.core.config import Config
from amhub.fleet.errors import UpstreamError
from .event_log import EventLog, LogType
from .selection import TargetCoordinate

logger = logging.getLogger("AMHUB.Alerts")

BADGE_HOLD_SECONDS = 2.0
TRIGGER_TYPE = 0
THREAT_LEVELS = (1, 2, 3, 4, 5)


class AlertStatus(Enum):
    IDLE = "idle"
    SENDING = "sending"
    SUCCESS = "success"
    ERROR = "error"


def alert_name(requester: str, now: Optional[datetime] = None) -> str:
    """
    Requester / mission id, or a timestamped default.

    Example:
        >>> alert_name("", datetime(2026, 10, 18, 9, 5, 7))
        'Alert-20261018090507'
    """
    requester = (requester or "").strip()
    if requester:
        return requester
    return f"Alert-{(now or datetime.now()).strftime('%Y%m%d%H%M%S')}"


def build_workflow_request(
    config: Config,
    name: str,
    target: TargetCoordinate,
    level: int,
    description: str,
) -> Dict[str, Any]:
    """Workflow trigger body in the upstream's wire format."""
    if level not in THREAT_LEVELS:
        raise ValueError(f"Threat level must be one of {THREAT_LEVELS}, got {level}")
    return {
        "workflow_uuid": config.workflow_uuid,
        "trigger_type": TRIGGER_TYPE,
        "name": name,
        "params": {
            "creator": config.creator_id,
            "latitude": target.latitude,
            "longitude": target.longitude,
            "level": level,
            "desc": description,
        },
    }


class AlertWorkflow:
    """
    Sends alerts through `send` and tracks the transient badge state.

    Example:
        >>> workflow = AlertWorkflow(client.send_workflow_alert, config, event_log)
        >>> workflow.trigger(target, requester="", level=3, description="...")
    """

    def __init__(
        self,
        send: Callable[[Dict[str, Any]], Dict[str, Any]],
        config: Config,
        event_log: EventLog,
        clock: Callable[[], float] = time.monotonic,
        badge_hold_seconds: float = BADGE_HOLD_SECONDS,
    ):
        self._send = send
        self.config = config
        self._event_log = event_log
        self._clock = clock
        self.badge_hold_seconds = badge_hold_seconds
        self._status = AlertStatus.IDLE
        self._finished_at = 0.0

    @property
    def status(self) -> AlertStatus:
        """Current badge; SUCCESS/ERROR revert to IDLE after the hold time."""
        if self._status in (AlertStatus.SUCCESS, AlertStatus.ERROR):
            if self._clock() - self._finished_at >= self.badge_hold_seconds:
                self._status = AlertStatus.IDLE
        return self._status

    def trigger(
        self,
        target: TargetCoordinate,
        requester: str,
        level: int,
        description: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Transmit one alert.

        Returns:
            Upstream response, or None when the send failed or one is already in progress
        """
        if self._status is AlertStatus.SENDING:
            logger.debug("Alert trigger ignored: transmission already in progress")
            return None

        name = alert_name(requester)
        payload = build_workflow_request(self.config, name, target, level, description)

        self._status = AlertStatus.SENDING
        self._event_log.add(LogType.REQUEST, f"TRANSMITTING ALERT: {name}", payload)
        try:
            result = self._send(payload)
        except UpstreamError as e:
            self._event_log.add(LogType.ERROR, "Transmission Failed", {"error": str(e)})
            self._finish(AlertStatus.ERROR)
            return None
        except Exception:
            self._finish(AlertStatus.ERROR)
            raise

        self._event_log.add(LogType.SUCCESS, "Workflow Transmission Successful", result)
        self._finish(AlertStatus.SUCCESS)
        return result

    def _finish(self, status: AlertStatus) -> None:
        self._status = status
        self._finished_at = self._clock()
