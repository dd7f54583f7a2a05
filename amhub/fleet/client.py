"""
Fleet API Client
================
Author: AMHUB Member
Date: 2026-10-18

Thin requests-based wrapper around the two upstream calls the console makes:
- GET project topology (polled)
- POST workflow alert trigger (one-shot, no retry)

Failures are classified into the fleet error taxonomy here so callers only
have to catch AuthError / UpstreamError.

Usage:
    from amhub.fleet.client import FleetClient

    client = FleetClient(get_config())
    body = client.fetch_topology()
"""

import json
import logging
from typing import Any, Dict, Optional

import requests

from amhub.core.config import Config
from .errors import AlertError, AuthError, StructureError, TransportError

logger = logging.getLogger("AMHUB.FleetClient")

# Upstream signals an expired/invalid token either via HTTP status or API code
AUTH_FAILURE_CODES = frozenset({401, 403, 200401})
AUTH_FAILURE_MARKERS = ("401", "unauthorized")


def is_auth_failure(code: Any = None, message: str = "") -> bool:
    """True when an error code or message carries an auth-failure marker."""
    try:
        if code is not None and int(code) in AUTH_FAILURE_CODES:
            return True
    except (TypeError, ValueError):
        pass
    text = str(message or "").lower()
    return any(marker in text for marker in AUTH_FAILURE_MARKERS)


def _parse_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


class FleetClient:
    """
    HTTP client for the fleet-management API.

    Example:
        >>> client = FleetClient(config)
        >>> body = client.fetch_topology()
        >>> body["data"]["list"][0]["host"]["device_sn"]
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-User-Token": self.config.user_token,
            "x-project-uuid": self.config.project_uuid,
        }

    def fetch_topology(self) -> Dict[str, Any]:
        """
        Fetch the raw project topology body.

        Returns:
            Parsed JSON body (shape is validated by the normalizer)

        Raises:
            AuthError: HTTP 401/403, or an auth code/message in any body
            TransportError: Network failure, timeout, other HTTP or API error
            StructureError: 2xx response that is not a JSON object
        """
        url = self.config.proxied(self.config.topology_url())

        try:
            response = self.session.get(
                url,
                headers=self._headers(),
                timeout=self.config.request_timeout_s,
            )
        except requests.Timeout as e:
            raise TransportError(f"Topology request timed out: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"Topology request failed: {e}") from e

        if not response.ok:
            text = response.text or response.reason or ""
            code = response.status_code
            error_body = _parse_json(text)
            if isinstance(error_body, dict) and error_body.get("code"):
                code = error_body["code"]
            message = f"Topology API Error: {response.status_code} - {text[:50]}"
            if is_auth_failure(code, text) or response.status_code in AUTH_FAILURE_CODES:
                raise AuthError(message)
            raise TransportError(message)

        body = _parse_json(response.text)
        if not isinstance(body, dict):
            raise StructureError("Topology response is not a JSON object")

        # HTTP 200 can still carry an API-level failure
        try:
            code = int(body.get("code") or 0)
        except (TypeError, ValueError) as e:
            raise StructureError(f"Topology response code is not numeric: {body.get('code')!r}") from e
        if code != 0:
            message = str(body.get("message", ""))
            if is_auth_failure(code, message):
                raise AuthError(f"Topology API rejected credentials: code {code} {message}".strip())
            raise TransportError(f"Topology API Error: code {code} {message}".strip())

        return body

    def send_workflow_alert(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Transmit a workflow trigger.

        Args:
            payload: WorkflowRequest dict (see amhub.console.alerts)

        Returns:
            Upstream response as a dict (text bodies are wrapped as {"message": ...})

        Raises:
            AlertError: Network failure or non-2xx response
        """
        url = self.config.proxied(self.config.api_url)

        try:
            response = self.session.post(
                url,
                headers=self._headers(),
                data=json.dumps(payload),
                timeout=self.config.request_timeout_s,
            )
        except requests.RequestException as e:
            logger.error(f"Alert transmission failed: {e}")
            raise AlertError(str(e)) from e

        content_type = response.headers.get("content-type", "")
        response_data = _parse_json(response.text) if "application/json" in content_type else None
        if not isinstance(response_data, dict):
            response_data = {"message": response.text or response.reason}

        if not response.ok:
            message = response_data.get("message") or f"HTTP Error: {response.status_code}"
            logger.error(f"Alert rejected: {message}")
            raise AlertError(message)

        return response_data
